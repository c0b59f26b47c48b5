"""Main menu reply keyboard and the bot command list."""

from __future__ import annotations

from aiogram.types import BotCommand, KeyboardButton, ReplyKeyboardMarkup

from scraper_bot.core.constants import COMMAND_DESCRIPTIONS, MENU_LAYOUT


def main_menu_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=label) for label in row] for row in MENU_LAYOUT],
        resize_keyboard=True,
    )


def bot_commands() -> list[BotCommand]:
    return [
        BotCommand(command=command, description=description)
        for command, description in COMMAND_DESCRIPTIONS.items()
    ]
