import random

QUESTION_TYPES = ("sum", "subtraction", "multiplication", "division")

SYMBOLS = {
    "sum": "+",
    "subtraction": "-",
    "multiplication": "x",
    "division": "/",
}


def make_question(rng=random) -> dict:
    qtype = rng.choice(QUESTION_TYPES)

    if qtype == "sum":
        n1 = rng.randint(1, 100)
        n2 = rng.randint(1, 100)
    elif qtype == "subtraction":
        n1 = rng.randint(1, 100)
        n2 = rng.randint(1, 100)
        # no negative answers
        if n1 < n2:
            n1, n2 = n2, n1
    elif qtype == "multiplication":
        n1 = rng.randint(1, 11)
        n2 = rng.randint(1, 11)
    else:
        n2 = rng.randint(1, 11)
        n1 = rng.randint(1, 11) * n2

    return {"type": qtype, "n1": n1, "n2": n2}


def solve(question: dict) -> int:
    qtype = question["type"]
    n1 = int(question["n1"])
    n2 = int(question["n2"])

    if qtype == "sum":
        return n1 + n2
    if qtype == "subtraction":
        return n1 - n2
    if qtype == "multiplication":
        return n1 * n2
    if qtype == "division":
        return n1 // n2
    raise ValueError(f"unknown question type: {qtype}")


def prompt(question: dict) -> str:
    return f"{question['n1']} {SYMBOLS[question['type']]} {question['n2']} = ?"
