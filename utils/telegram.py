from utils.config import BotDestination, Config
from utils.http import HttpRequestError, post_json
from utils.logging import get_logger

logger = get_logger("utils.telegram")

TELEGRAM_API_URL = "https://api.telegram.org"
MAX_MESSAGE_LENGTH = 4096


class TelegramError(Exception):
    """Telegram rejected the message or could not be reached."""


async def _post_message(destination: BotDestination, text: str) -> None:
    url = f"{TELEGRAM_API_URL}/bot{destination.token}/sendMessage"
    payload = {
        "chat_id": destination.chat_id,
        "text": text,
        "parse_mode": "Markdown",
    }
    try:
        response = await post_json(
            url,
            payload,
            timeout=Config.get_request_timeout(),
            log_url=f"{TELEGRAM_API_URL}/bot***/sendMessage",
        )
    except HttpRequestError as e:
        raise TelegramError(str(e)) from e
    if isinstance(response, dict) and response.get("ok") is False:
        raise TelegramError(f"Telegram API error: {response.get('description')}")


async def send_telegram_message(destination: BotDestination, message: str) -> bool:
    """
    Send a Markdown message to one bot/chat.

    Delivery failures are logged and never raised: a lost notification must
    not abort the monitoring run. Returns True when Telegram accepted it.
    """
    if len(message) > MAX_MESSAGE_LENGTH:
        message = message[: MAX_MESSAGE_LENGTH - 3] + "..."
    logger.debug("Sending telegram message to chat %s:\n%s", destination.chat_id, message)
    try:
        await _post_message(destination, message)
    except TelegramError as e:
        logger.error("Failed to send telegram message to chat %s: %s", destination.chat_id, e)
        return False
    except Exception:
        logger.exception("Unexpected error sending telegram message to chat %s", destination.chat_id)
        return False
    return True
