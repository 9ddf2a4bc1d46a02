import os

APP_TITLE = "Honey Hive"
COOKIE_NAME = "hive_sess"

DB_PATH = os.getenv("DB_PATH", "hive.sqlite3")
DB_TIMEOUT = 10.0

# Civil day used for the daily honey reset
RESET_TIMEZONE = os.getenv("RESET_TIMEZONE", "Europe/Madrid")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LEADERBOARD_SIZE = 10
LEADERBOARD_METRICS = ("honey", "totalhoney", "uniquehivees", "totalhivees")

DEFAULT_AVATAR = "./assets/HiveFest.png"
USERNAME_MIN = 2
USERNAME_MAX = 20
