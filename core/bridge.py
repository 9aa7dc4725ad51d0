"""Bridge assembly: exposes each configured bulb as a HomeKit accessory.

HAP-python owns the accessory protocol (pairing, persistence, wire
encoding). This module only builds the accessories, registers each bulb
controller's setters as characteristic callbacks, and runs the driver until
a signal stops it.
"""

import logging
import signal

from pyhap.accessory import Accessory, Bridge
from pyhap.accessory_driver import AccessoryDriver
from pyhap.const import CATEGORY_LIGHTBULB

from core.config import BridgeConfig
from core.controller import BulbController, create_controllers
from core.locator import locate_hub
from core.session import HubSession

_LOGGER = logging.getLogger(__name__)

INITIAL_BRIGHTNESS = 100
INITIAL_TEMPERATURE = 200


def deferred_setter(driver, controller: BulbController, setter):
    """Wrap a controller setter for use as a characteristic callback.

    HAP-python calls setter callbacks on its event loop thread. The value is
    queued on the controller and the hub request runs on the driver's
    executor, so a slow hub never stalls the HomeKit server.
    """
    def callback(value):
        controller.enqueue(setter, value)
        driver.add_job(controller.flush)
    return callback


def attach_handlers(driver, service, controller: BulbController):
    """Register the controller as the handler for a Lightbulb service.

    Returns:
        Tuple of the (on, brightness, colour temperature) characteristics
    """
    char_on = service.configure_char(
        'On', value=False,
        setter_callback=deferred_setter(driver, controller, controller.set_power))
    char_brightness = service.configure_char(
        'Brightness', value=INITIAL_BRIGHTNESS,
        setter_callback=deferred_setter(driver, controller, controller.set_brightness))
    char_temperature = service.configure_char(
        'ColorTemperature', value=INITIAL_TEMPERATURE,
        setter_callback=deferred_setter(driver, controller, controller.set_temperature))
    return char_on, char_brightness, char_temperature


class TradfriBulb(Accessory):
    """Lightbulb accessory backed by one bulb on the hub."""

    category = CATEGORY_LIGHTBULB

    def __init__(self, driver, controller: BulbController, *args, **kwargs):
        super().__init__(driver, controller.name, *args, **kwargs)
        self.controller = controller

        serv_light = self.add_preload_service('Lightbulb', chars=['Brightness', 'ColorTemperature'])
        self.char_on, self.char_brightness, self.char_temperature = attach_handlers(driver, serv_light, controller)


def build_bridge(driver, bridge_name: str, controllers: dict[str, BulbController]) -> Bridge:
    """Create the bridge accessory with one bulb accessory per controller."""
    bridge = Bridge(driver, bridge_name)
    for controller in controllers.values():
        bridge.add_accessory(TradfriBulb(driver, controller))
        _LOGGER.info("Registered %s (%s)", controller.name, controller.path)
    return bridge


def run_bridge(config: BridgeConfig, locator=locate_hub, connect=HubSession.connect,
               driver_factory=AccessoryDriver):
    """Run the bridge until SIGINT or SIGTERM.

    Startup errors (DiscoveryError, SessionError) propagate to the caller.
    The hub session is closed however the driver exits.
    """
    address = config.hub_address
    if address is None:
        _LOGGER.info("Browsing for a Tradfri hub...")
        address = locator(config.discovery_timeout)
    else:
        _LOGGER.info("Using configured hub at %s", address)

    session = connect(address, config.identity, config.secret, timeout=config.request_timeout)
    try:
        controllers = create_controllers(session, config.bulbs)
        if not controllers:
            _LOGGER.warning("No bulbs configured, the bridge will be empty")

        config.persist_file.parent.mkdir(parents=True, exist_ok=True)
        driver = driver_factory(
            port=config.port,
            persist_file=str(config.persist_file),
            pincode=config.pincode.encode('ascii'),
        )
        driver.add_accessory(accessory=build_bridge(driver, config.bridge_name, controllers))

        signal.signal(signal.SIGINT, driver.signal_handler)
        signal.signal(signal.SIGTERM, driver.signal_handler)

        _LOGGER.info("Starting %s with %d bulb(s), pin %s",
                     config.bridge_name, len(controllers), config.pincode)
        driver.start()
    finally:
        session.close()
    _LOGGER.info("Bridge stopped")
