"""Enum types shared by the storage layer and the scene state machine."""

from enum import Enum


class SourceType(str, Enum):
    """Origin of a scraped reel."""
    competitor = "competitor"
    hashtag = "hashtag"


class RunStatus(str, Enum):
    """Lifecycle status of a parsing run."""
    running = "running"
    completed = "completed"
    failed = "failed"
    partial_success = "partial_success"


class SceneName(str, Enum):
    """Registered scene identifiers."""
    projects = "instagram_scraper_projects"
    competitors = "instagram_scraper_competitors"
    hashtags = "instagram_scraper_hashtags"
    scraping = "instagram_scraper_scraping"
    reels = "instagram_scraper_reels"
    analytics = "instagram_scraper_analytics"
    notifications = "instagram_scraper_notifications"
    collections = "instagram_scraper_collections"
    chatbot = "instagram_scraper_chatbot"


class SceneStep(str, Enum):
    """Steps of every scene.  ``None`` on the session means idle."""
    project_list = "PROJECT_LIST"
    create_project = "CREATE_PROJECT"
    project_selection = "PROJECT_SELECTION"
    competitor_list = "COMPETITOR_LIST"
    add_competitor = "ADD_COMPETITOR"
    hashtag_list = "HASHTAG_LIST"
    add_hashtag = "ADD_HASHTAG"
    scraping_menu = "SCRAPING_MENU"
    scraping_competitors = "SCRAPING_COMPETITORS"
    scraping_hashtags = "SCRAPING_HASHTAGS"
    reels_list = "REELS_LIST"
    analytics_report = "ANALYTICS_REPORT"
