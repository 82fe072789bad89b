"""실행 환경 변수 (.env)"""
import os

from dotenv import load_dotenv

load_dotenv()

IS_DEV = os.getenv("DEV") == "TRUE"

if IS_DEV:
    TOKEN = os.getenv("DEV_DISCORD_TOKEN")
    APPLICATION_ID = int(os.getenv("DEV_APPLICATION_ID") or 0)
else:
    TOKEN = os.getenv("DISCORD_TOKEN")
    APPLICATION_ID = int(os.getenv("APPLICATION_ID") or 0)

GUILD_IDS = [int(gid) for gid in (os.getenv("GUILD_IDS") or "").split(",") if gid.strip()]

DATABASE_URL = os.getenv("DATABASE_URL") or "sqlite://heistbot.sqlite3"
