"""Protocol building blocks for a QQ chat client: TLV, highway framing, network types, auth, devices, events and web API parsing."""

__version__ = "0.1.0"