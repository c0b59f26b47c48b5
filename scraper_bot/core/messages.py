"""User-facing texts (RU).

Templates use ``str.format`` placeholders.  Texts rendered with HTML parse
mode are marked in the section header; their placeholders must be escaped
by the caller.
"""

# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
NOT_REGISTERED = "Вы не зарегистрированы. Пожалуйста, используйте /start для начала работы."
NO_PROJECTS_HINT = "У вас нет проектов. Создайте проект с помощью команды /projects"
PROJECT_NOT_FOUND = "Проект не найден. Возможно, он был удален."
INVALID_PAYLOAD = "Ошибка: некорректные данные кнопки. Пожалуйста, вернитесь назад и выберите проект снова."
ANSWER_ERROR = "Ошибка"
ANSWER_UNAVAILABLE = "Действие недоступно"
ANSWER_DELETED = "Удалено"
ANSWER_DELETE_FAILED = "Ошибка удаления"

BUTTON_EXIT = "Выйти"
BUTTON_BACK_TO_PROJECTS = "Назад к проектам"
BUTTON_BACK_TO_PROJECT = "🔙 Назад к проекту"
BUTTON_CANCEL = "Отмена"

# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
PROJECTS_EMPTY = "У вас нет проектов. Хотите создать новый?"
PROJECTS_LIST = "Ваши проекты:"
PROJECTS_LOAD_ERROR = "Произошла ошибка при загрузке проектов. Попробуйте позже."
PROJECTS_EXIT_ANSWER = "Выход из режима управления проектами"
PROJECTS_EXIT = "Вы вышли из режима управления проектами"
PROJECT_NAME_PROMPT = "Введите название нового проекта (минимум 3 символа):"
PROJECT_NAME_INVALID = "Название проекта должно содержать не менее 3 символов. Попробуйте еще раз:"
PROJECT_CREATED = 'Проект "{name}" успешно создан!'
PROJECT_CREATE_ERROR = "Произошла ошибка при создании проекта. Пожалуйста, попробуйте позже."
PROJECT_MENU = 'Проект "{name}". Выберите действие:'
PROJECT_LOAD_ERROR = "Произошла ошибка при получении данных проекта. Пожалуйста, попробуйте позже."
USER_NOT_FOUND = "Ошибка: пользователь не найден."

BUTTON_CREATE_PROJECT = "Создать проект"
BUTTON_CREATE_NEW_PROJECT = "Создать новый проект"
BUTTON_PROJECT_ACTIVE = "{name} (Активен)"
BUTTON_PROJECT_INACTIVE = "{name} (Неактивен)"
BUTTON_PROJECT_COMPETITORS = "👥 Конкуренты"
BUTTON_PROJECT_HASHTAGS = "#️⃣ Хештеги"
BUTTON_PROJECT_SCRAPING = "🎬 Запустить скрапинг"
BUTTON_PROJECT_REELS = "📱 Просмотреть Reels"
BUTTON_PROJECT_ANALYTICS = "📈 Аналитика"
BUTTON_TO_PROJECT_LIST = "К списку проектов"

# ---------------------------------------------------------------------------
# Competitors
# ---------------------------------------------------------------------------
COMPETITORS_SELECT_PROJECT = "Выберите проект для просмотра конкурентов:"
COMPETITORS_EMPTY = 'В проекте "{name}" нет добавленных конкурентов. Хотите добавить?'
COMPETITORS_LIST = 'Конкуренты в проекте "{name}":\n\n{items}'
COMPETITORS_LOAD_ERROR = "Произошла ошибка при получении конкурентов. Пожалуйста, попробуйте позже."
COMPETITORS_EXIT = "Вы вышли из режима управления конкурентами"
COMPETITOR_URL_PROMPT = "Введите Instagram URL конкурента (например, https://www.instagram.com/example):"
COMPETITOR_URL_INVALID = (
    "Пожалуйста, введите корректный URL Instagram-аккаунта "
    "(например, https://www.instagram.com/example):"
)
COMPETITOR_PROJECT_MISSING = "Ошибка: не указан проект. Начните сначала."
COMPETITOR_ADDED = "Конкурент @{username} успешно добавлен!"
COMPETITOR_ADD_FAILED = "Ошибка при добавлении конкурента. Попробуйте позже."
COMPETITOR_ADD_ERROR = "Произошла внутренняя ошибка при добавлении конкурента. Попробуйте позже."
COMPETITOR_DELETED = "Конкурент @{username} удален."
COMPETITOR_DELETE_FAILED = "Ошибка при удалении конкурента. Пожалуйста, попробуйте снова."
COMPETITOR_DELETE_ERROR = "Произошла техническая ошибка при удалении конкурента. Попробуйте позже."
INVALID_COMPETITOR_PAYLOAD = "Ошибка выбора проекта. Пожалуйста, вернитесь назад и выберите проект снова."

BUTTON_ADD_COMPETITOR = "Добавить конкурента"
BUTTON_DELETE_COMPETITOR = "🗑️ Удалить {username}"
BUTTON_VIEW_ALL_COMPETITORS = "Посмотреть всех конкурентов"
BUTTON_ADD_MORE_COMPETITOR = "Добавить еще конкурента"

# ---------------------------------------------------------------------------
# Hashtags
# ---------------------------------------------------------------------------
HASHTAGS_SELECT_PROJECT = "Выберите проект для управления хештегами:"
HASHTAGS_EMPTY = 'В проекте "{name}" нет отслеживаемых хештегов. Хотите добавить первый?'
HASHTAGS_LIST = 'Хештеги в проекте "{name}":\n\n{items}\n\nЧто вы хотите сделать дальше?'
HASHTAGS_LOAD_ERROR = "Не удалось загрузить список хештегов. Попробуйте позже."
HASHTAGS_EXIT = "Вы вышли из режима управления хештегами"
HASHTAG_PROMPT = "Введите хештег для добавления (без #):"
HASHTAG_INVALID = (
    "Некорректный хештег. Введите одно слово без пробелов "
    "(минимум 2 символа), # ставить не нужно."
)
HASHTAG_PROJECT_MISSING = "Ошибка: проект не определен. Начните сначала."
HASHTAG_ADDED = "Хештег #{hashtag} успешно добавлен."
HASHTAG_ADD_FAILED = "Не удалось добавить хештег #{hashtag}. Возможно, он уже существует или произошла ошибка."
HASHTAG_ADD_ERROR = "Произошла техническая ошибка при добавлении хештега."
HASHTAG_INPUT_CANCELLED = "Ввод отменен."
HASHTAG_DELETED = "Хештег #{hashtag} удален."
HASHTAG_DELETE_NOT_FOUND = "Хештег #{hashtag} не найден. Возможно, он уже удален."
HASHTAG_DELETE_ERROR = "Произошла ошибка при удалении хештега."
INVALID_HASHTAG_PROJECT_PAYLOAD = "Ошибка выбора проекта. Пожалуйста, вернитесь назад."
INVALID_DELETE_HASHTAG_PAYLOAD = "Ошибка при удалении хештега."

BUTTON_ADD_HASHTAG = "Добавить хештег"
BUTTON_DELETE_HASHTAG = "🗑️ Удалить #{hashtag}"

# ---------------------------------------------------------------------------
# Scraping (HTML parse mode)
# ---------------------------------------------------------------------------
SCRAPING_SELECT_PROJECT = "Выберите проект для скрапинга:"
SCRAPING_MENU_HEADER = '🔍 <b>Скрапинг для проекта "{name}"</b>\n\n'
SCRAPING_NO_SOURCES = (
    "⚠️ У вас нет добавленных конкурентов или хештегов для скрапинга.\n"
    "Пожалуйста, добавьте конкурентов или хештеги перед запуском скрапинга."
)
SCRAPING_CHOOSE_SOURCE = "<b>Выберите источник для скрапинга:</b>\n\n"
SCRAPING_COMPETITORS_HEADER = "👥 <b>Конкуренты ({count}):</b>\n"
SCRAPING_HASHTAGS_HEADER = "📊 <b>Хештеги ({count}):</b>\n"
SCRAPING_MORE = "...и еще {count}\n"
SCRAPING_PICK_COMPETITORS = "👥 <b>Выберите конкурентов для скрапинга:</b>"
SCRAPING_PICK_HASHTAGS = "📊 <b>Выберите хештеги для скрапинга:</b>"
SCRAPING_NO_COMPETITORS = "У вас нет добавленных конкурентов."
SCRAPING_NO_HASHTAGS = "У вас нет добавленных хештегов."
SCRAPING_LOAD_ERROR = "Произошла ошибка при загрузке данных. Попробуйте еще раз."
SCRAPING_SOURCE_NOT_FOUND = "Источник не найден. Возможно, он был удален."
SCRAPING_SOURCE_DONE = "✅ {source}: найдено {found}, сохранено {added}."
SCRAPING_SOURCE_FAILED = "❌ Не удалось выполнить скрапинг {source}. Попробуйте позже."
SCRAPING_SUMMARY = "Скрапинг завершен. Обработано источников: {done} из {total}, сохранено Reels: {added}."
SCRAPING_ERROR = "Произошла техническая ошибка во время скрапинга. Попробуйте позже."
SCRAPING_EXIT = "Вы вышли из режима скрапинга"
SCRAPING_UNAVAILABLE = "Скрапинг недоступен: сервис сбора данных не настроен."

BUTTON_ADD_COMPETITORS = "👥 Добавить конкурентов"
BUTTON_ADD_HASHTAGS = "📊 Добавить хештеги"
BUTTON_SCRAPE_COMPETITORS = "👥 Скрапить конкурентов"
BUTTON_SCRAPE_HASHTAGS = "📊 Скрапить хештеги"
BUTTON_SCRAPE_ALL = "🔄 Скрапить всё"
BUTTON_SCRAPE_ALL_COMPETITORS = "🔄 Скрапить всех конкурентов"
BUTTON_SCRAPE_ALL_HASHTAGS = "🔄 Скрапить все хештеги"
BUTTON_BACK = "🔙 Назад"

# ---------------------------------------------------------------------------
# Reels (HTML parse mode)
# ---------------------------------------------------------------------------
REELS_SELECT_PROJECT = "Выберите проект для просмотра Reels:"
REELS_EMPTY = 'В проекте "{name}" пока нет собранных Reels. Запустите скрапинг.'
REELS_HEADER = "📱 <b>Reels проекта \"{name}\"</b> (страница {page})\n\n"
REELS_ITEM = "{index}. <a href=\"{url}\">{author}</a> · 👁 {views} · ❤️ {likes} · 💬 {comments} · {published}"
REELS_LOAD_ERROR = "Произошла ошибка при загрузке Reels. Попробуйте позже."
REELS_EXIT = "Вы вышли из режима просмотра Reels"

BUTTON_PREV_PAGE = "⬅️ Назад"
BUTTON_NEXT_PAGE = "Вперед ➡️"

# ---------------------------------------------------------------------------
# Analytics (HTML parse mode)
# ---------------------------------------------------------------------------
ANALYTICS_SELECT_PROJECT = "Выберите проект для аналитики:"
ANALYTICS_EMPTY = 'В проекте "{name}" пока нет данных для аналитики. Запустите скрапинг.'
ANALYTICS_REPORT = (
    "📈 <b>Аналитика проекта \"{name}\"</b>\n\n"
    "Всего Reels: {total}\n"
    "Из аккаунтов конкурентов: {from_competitors}\n"
    "Из хештегов: {from_hashtags}\n"
    "Суммарно просмотров: {total_views}\n"
    "Среднее число просмотров: {avg_views}\n"
    "Среднее число лайков: {avg_likes}\n"
    "Среднее число комментариев: {avg_comments}\n"
)
ANALYTICS_TOP_HEADER = "\n🏆 <b>Топ по просмотрам:</b>\n"
ANALYTICS_TOP_ITEM = "{index}. <a href=\"{url}\">{author}</a> · 👁 {views}\n"
ANALYTICS_LOAD_ERROR = "Произошла ошибка при расчете аналитики. Попробуйте позже."
ANALYTICS_EXIT = "Вы вышли из режима аналитики"

# ---------------------------------------------------------------------------
# Placeholder sections
# ---------------------------------------------------------------------------
SECTION_UNDER_CONSTRUCTION = "🚧 Раздел «{title}» находится в разработке."

# ---------------------------------------------------------------------------
# Top-level bot
# ---------------------------------------------------------------------------
START_GREETING = (
    "Привет, {name}! Я помогу отслеживать Reels конкурентов и хештеги в Instagram.\n"
    "Выберите раздел в меню ниже."
)
START_ERROR = "Произошла ошибка при регистрации. Пожалуйста, попробуйте позже."
HELP_TEXT = (
    "Доступные команды:\n"
    "/projects - управление проектами\n"
    "/competitors - управление конкурентами\n"
    "/hashtags - управление хештегами\n"
    "/scrape - запуск скрапинга\n"
    "/reels - просмотр собранных Reels\n"
    "/analytics - аналитика по проектам\n"
    "/notifications, /collections, /chatbot - разделы в разработке"
)
