"""Application constants.

Contains input limits, paging sizes, scraping defaults and the bot's
command / menu tables.
"""

from scraper_bot.models.enums import SceneName

# ---------------------------------------------------------------------------
# Input validation limits
# ---------------------------------------------------------------------------
PROJECT_NAME_MIN_LENGTH: int = 3
PROJECT_NAME_MAX_LENGTH: int = 100
HASHTAG_MIN_LENGTH: int = 2
HASHTAG_MAX_LENGTH: int = 50
INSTAGRAM_URL_MARKER: str = "instagram.com/"

# Telegram rejects callback_data longer than 64 bytes
CALLBACK_DATA_MAX_BYTES: int = 64

# ---------------------------------------------------------------------------
# Listing / paging
# ---------------------------------------------------------------------------
SCRAPING_MENU_PREVIEW: int = 5
REELS_PAGE_SIZE: int = 5
ANALYTICS_TOP_REELS: int = 3

# Hops allowed when one transition triggers another (reenter, enter)
MAX_SCENE_HOPS: int = 3

# ---------------------------------------------------------------------------
# Apify result shaping
# ---------------------------------------------------------------------------
# Fetch more than requested so enough reels survive the filters.
APIFY_OVERFETCH_FACTOR: int = 3
REEL_URL_MARKER: str = "/reel/"

# ---------------------------------------------------------------------------
# Commands and menu buttons -> scene entry targets
# ---------------------------------------------------------------------------
COMMAND_SCENES: dict[str, SceneName] = {
    "projects": SceneName.projects,
    "competitors": SceneName.competitors,
    "hashtags": SceneName.hashtags,
    "scrape": SceneName.scraping,
    "reels": SceneName.reels,
    "analytics": SceneName.analytics,
    "notifications": SceneName.notifications,
    "collections": SceneName.collections,
    "chatbot": SceneName.chatbot,
}

COMMAND_DESCRIPTIONS: dict[str, str] = {
    "start": "Начать работу с ботом",
    "projects": "Управление проектами",
    "competitors": "Управление конкурентами",
    "hashtags": "Управление хэштегами",
    "scrape": "Запустить скрапинг",
    "reels": "Просмотр результатов",
    "analytics": "Аналитика по проектам",
    "notifications": "Уведомления",
    "collections": "Коллекции",
    "chatbot": "Чат-бот",
    "help": "Помощь",
}

MENU_SCENES: dict[str, SceneName] = {
    "📊 Проекты": SceneName.projects,
    "🔍 Конкуренты": SceneName.competitors,
    "#️⃣ Хэштеги": SceneName.hashtags,
    "🎬 Запустить скрапинг": SceneName.scraping,
    "📱 Результаты": SceneName.reels,
    "📈 Аналитика": SceneName.analytics,
    "🔔 Уведомления": SceneName.notifications,
    "📁 Коллекции": SceneName.collections,
    "🤖 Чат-бот": SceneName.chatbot,
}

MENU_HELP: str = "ℹ️ Помощь"

MENU_LAYOUT: list[list[str]] = [
    ["📊 Проекты", "🔍 Конкуренты"],
    ["#️⃣ Хэштеги", "🎬 Запустить скрапинг"],
    ["📱 Результаты", "📈 Аналитика"],
    ["🔔 Уведомления", "📁 Коллекции"],
    ["🤖 Чат-бот", MENU_HELP],
]

# ---------------------------------------------------------------------------
# Labels for the placeholder sections
# ---------------------------------------------------------------------------
SECTION_TITLES: dict[SceneName, str] = {
    SceneName.notifications: "Уведомления",
    SceneName.collections: "Коллекции",
    SceneName.chatbot: "Чат-бот",
}
