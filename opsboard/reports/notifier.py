"""WhatsApp delivery through the messaging gateway function."""

from __future__ import annotations

import re
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel

from opsboard.core.logging_config import get_logger
from opsboard.functions import FunctionInvokeError, FunctionsClient

logger = get_logger(__name__)

_NON_DIGITS = re.compile(r"\D+")


class SendResult(BaseModel):
    """Outcome of one recipient delivery."""

    phone_number: str
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None


def normalize_phone(phone: str) -> str:
    """Strip everything but digits from a phone number."""
    return _NON_DIGITS.sub("", phone or "")


def _message_id(response: Any) -> Optional[str]:
    if not isinstance(response, dict):
        return None
    key = response.get("key")
    if isinstance(key, dict) and key.get("id"):
        return str(key["id"])
    for name in ("messageId", "message_id", "id"):
        if response.get(name):
            return str(response[name])
    data = response.get("data")
    if isinstance(data, dict):
        return _message_id(data)
    return None


class WhatsAppNotifier:
    """Send text messages through the ``send-whatsapp-message`` function."""

    def __init__(self, functions: FunctionsClient, *, send_function: str = "send-whatsapp-message") -> None:
        self._functions = functions
        self._send_function = send_function

    async def send(self, instance_name: str, phone_number: str, message: str) -> SendResult:
        """Deliver ``message`` to one recipient. Failures are reported, not raised."""
        digits = normalize_phone(phone_number)
        if not digits:
            return SendResult(phone_number=phone_number, success=False, error="Invalid phone number")
        body = {"instanceName": instance_name, "phoneNumber": digits, "message": message}
        try:
            response = await self._functions.invoke(self._send_function, body)
        except FunctionInvokeError as e:
            logger.warning("WhatsApp send to %s failed: %s", digits, e)
            return SendResult(phone_number=phone_number, success=False, error=str(e))
        except Exception as e:
            logger.error("WhatsApp send to %s aborted: %s", digits, e, exc_info=True)
            return SendResult(phone_number=phone_number, success=False, error=str(e) or type(e).__name__)
        if isinstance(response, dict) and (response.get("error") or response.get("success") is False):
            error = response.get("error") or response.get("message") or "Send rejected by gateway"
            logger.warning("WhatsApp send to %s rejected: %s", digits, error)
            return SendResult(phone_number=phone_number, success=False, error=str(error))
        return SendResult(phone_number=phone_number, success=True, message_id=_message_id(response))

    async def send_all(self, instance_name: str, phone_numbers: Sequence[str], message: str) -> List[SendResult]:
        """Deliver ``message`` to every recipient in order."""
        results: List[SendResult] = []
        for phone in phone_numbers:
            results.append(await self.send(instance_name, phone, message))
        return results
