"""Core functionality for the Tradfri bridge.

This package contains:
- locator: Hub discovery over multicast DNS
- transport: DTLS CoAP transport (aiocoap)
- session: HubSession, the serialised request channel shared by all bulbs
- controller: BulbController, semantic operations on one bulb
- bridge: HomeKit bridge assembly (HAP-python)
- config: Configuration loading and bulb table persistence
- log: Click-styled logging handler
- errors: Exception hierarchy
"""
