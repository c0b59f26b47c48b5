"""aiogram handlers: turn Telegram updates into scene runner calls.

Handlers are thin: they build a ``ChatUser``, load the scene session from
the FSM context, call the runner and render the ``SceneResult``.  The
runner is injected as dispatcher workflow data (``runner``), the storage
adapter as ``storage_adapter``.
"""

from __future__ import annotations

import logging

from aiogram import Bot, F, Router, types
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import ReplyKeyboardRemove

from scraper_bot.bot.menu import main_menu_keyboard
from scraper_bot.bot.runner import SceneRunner
from scraper_bot.bot.session_store import load_session, save_session
from scraper_bot.core import messages
from scraper_bot.core.constants import COMMAND_SCENES, MENU_HELP, MENU_SCENES
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.enums import SceneName
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes.base import SceneResult
from scraper_bot.services.users import register_user

logger = logging.getLogger(__name__)

router = Router(name="scenes")


def chat_user_from(user: types.User) -> ChatUser:
    return ChatUser(
        telegram_id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
    )


async def send_replies(bot: Bot, chat_id: int, result: SceneResult) -> None:
    for reply in result.replies:
        markup = reply.keyboard
        if markup is None and reply.remove_keyboard:
            markup = ReplyKeyboardRemove()
        await bot.send_message(chat_id, reply.text, reply_markup=markup, parse_mode=reply.parse_mode)


async def _enter_scene(
    message: types.Message, state: FSMContext, bot: Bot, runner: SceneRunner, name: SceneName
) -> None:
    if message.from_user is None:
        return
    result = await runner.enter(name, chat_user_from(message.from_user))
    await save_session(state, result.session)
    await send_replies(bot, message.chat.id, result)


# ---------------------------------------------------------------------------
# Top-level commands
# ---------------------------------------------------------------------------

@router.message(CommandStart())
async def on_start(message: types.Message, state: FSMContext, storage_adapter: StorageAdapter) -> None:
    if message.from_user is None:
        return
    await save_session(state, SceneSession())
    user = chat_user_from(message.from_user)
    try:
        await register_user(storage_adapter, user)
    except Exception:
        logger.exception("start_registration_failed", extra={"telegram_id": user.telegram_id})
        await message.answer(messages.START_ERROR)
        return

    name = user.first_name or user.username or ""
    await message.answer(messages.START_GREETING.format(name=name), reply_markup=main_menu_keyboard())


@router.message(Command("help"))
@router.message(F.text == MENU_HELP)
async def on_help(message: types.Message) -> None:
    await message.answer(messages.HELP_TEXT, reply_markup=main_menu_keyboard())


@router.message(Command(*COMMAND_SCENES))
async def on_scene_command(
    message: types.Message,
    command: CommandObject,
    state: FSMContext,
    bot: Bot,
    runner: SceneRunner,
) -> None:
    await _enter_scene(message, state, bot, runner, COMMAND_SCENES[command.command])


@router.message(F.text.in_(tuple(MENU_SCENES)))
async def on_menu_button(
    message: types.Message, state: FSMContext, bot: Bot, runner: SceneRunner
) -> None:
    await _enter_scene(message, state, bot, runner, MENU_SCENES[message.text])


# ---------------------------------------------------------------------------
# Scene input
# ---------------------------------------------------------------------------

@router.callback_query()
async def on_callback(
    callback: types.CallbackQuery, state: FSMContext, bot: Bot, runner: SceneRunner
) -> None:
    user = chat_user_from(callback.from_user)
    session = await load_session(state)
    result = await runner.handle_callback(session, callback.data or "", user)
    await save_session(state, result.session)

    # Long transitions (scraping) can outlive the query; a late answer is not fatal.
    try:
        await callback.answer(result.callback_answer)
    except TelegramBadRequest as exc:
        logger.warning("callback_answer_failed", extra={"error": str(exc)})

    origin = callback.message
    chat_id = origin.chat.id if origin is not None else user.telegram_id
    if result.delete_origin and isinstance(origin, types.Message):
        try:
            await origin.delete()
        except TelegramBadRequest as exc:
            logger.warning("origin_delete_failed", extra={"error": str(exc)})

    await send_replies(bot, chat_id, result)


@router.message(F.text)
async def on_text(message: types.Message, state: FSMContext, bot: Bot, runner: SceneRunner) -> None:
    if message.from_user is None or message.text is None:
        return
    session = await load_session(state)
    result = await runner.handle_text(session, message.text, chat_user_from(message.from_user))
    await save_session(state, result.session)
    await send_replies(bot, message.chat.id, result)
