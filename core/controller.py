"""BulbController class binding one hub bulb to the shared hub session.

Setters are the handlers for characteristic changes. The accessory layer
queues them with enqueue() and runs them through flush() on a worker thread.
A failed command is logged and reported through the return value; it never
raises, so one bulb's failure cannot disturb another bulb.
"""

import logging
import threading
from collections import deque
from typing import Callable, Mapping

from core.errors import RequestError
from core.session import HubSession
from models.translator import (
    decode_status,
    encode_command,
    serialize_payload,
    temperature_to_color,
)
from models.types import (
    BrightnessCommand,
    BulbCommand,
    HubStatusResponse,
    PowerCommand,
    TemperatureCommand,
    bulb_path,
)

_LOGGER = logging.getLogger(__name__)


class BulbController:
    """Semantic operations on a single bulb."""

    def __init__(self, session: HubSession, bulb_id: str, name: str | None = None):
        self.session = session
        self.bulb_id = str(bulb_id)
        self.name = name or self.bulb_id
        self.path = bulb_path(self.bulb_id)
        # Held for each send; re-entered by flush()
        self._lock = threading.RLock()
        self._pending = deque()

    def __repr__(self) -> str:
        return f"BulbController({self.name!r}, {self.path!r})"

    def handle(self, command: BulbCommand) -> bool:
        """Translate a command and send it to the hub.

        Returns:
            True if the hub accepted the command, False otherwise
        """
        body = serialize_payload(encode_command(command))
        with self._lock:
            try:
                self.session.put(self.path, body)
            except RequestError as e:
                _LOGGER.error("%s: %s failed: %s", self.name, command, e)
                return False
        return True

    def set_power(self, on: bool) -> bool:
        """Turn the bulb on or off."""
        ok = self.handle(PowerCommand(bool(on)))
        if ok:
            _LOGGER.info("%s: light state %s", self.name, 'on' if on else 'off')
        return ok

    def set_brightness(self, level: int) -> bool:
        """Set brightness (0-100)."""
        ok = self.handle(BrightnessCommand(int(level)))
        if ok:
            _LOGGER.info("%s: light brightness %d", self.name, level)
        return ok

    def set_temperature(self, mireds: int) -> bool:
        """Set colour temperature, mapped onto the nearest hub colour preset."""
        _LOGGER.info("%s: setting to %s", self.name, temperature_to_color(int(mireds)))
        ok = self.handle(TemperatureCommand(int(mireds)))
        if ok:
            _LOGGER.info("%s: light temp %d", self.name, mireds)
        return ok

    def enqueue(self, setter: Callable[[object], bool], value) -> None:
        """Queue a setter call for the next flush()."""
        self._pending.append((setter, value))

    def flush(self) -> None:
        """Run queued setter calls in the order they were queued.

        Safe to call from several worker threads at once: only one of them
        drains the queue at a time, the others find it empty.
        """
        with self._lock:
            while self._pending:
                setter, value = self._pending.popleft()
                setter(value)

    def get_status(self) -> HubStatusResponse:
        """Read the bulb's current state from the hub.

        Raises:
            RequestError: If the hub request fails
            DecodeError: If the reply cannot be parsed
        """
        return decode_status(self.session.get(self.path))


def create_controllers(session: HubSession, bulbs: Mapping[str, str]) -> dict[str, BulbController]:
    """Create one controller per configured bulb, keyed by display name."""
    return {name: BulbController(session, bulb_id, name) for name, bulb_id in bulbs.items()}
