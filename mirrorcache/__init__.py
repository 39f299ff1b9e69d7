"""
mirrorcache — A Queryable Mirror of Discord Gateway State
==========================================================
Consumes the gateway's delta events, keeps a denormalized copy of guilds,
channels, roles, members, messages and presences in a pluggable storage
backend, and answers "what may this user do here?" from that copy without
touching the network.

Package layout::

    mirrorcache/
    ├── config.py            # YAML → typed Python config
    ├── constants.py         # Permission bits, channel & overwrite kinds
    ├── errors.py            # Error taxonomy
    ├── engine/
    │   ├── payloads.py      # Pydantic models of gateway payloads
    │   ├── models.py        # Cached entity dataclasses
    │   ├── events.py        # EventType + GatewayEvent envelope
    │   ├── backend.py       # Abstract storage port
    │   └── permissions.py   # Permission resolver
    ├── services/
    │   ├── synchronizer.py  # Event → backend calls dispatch table
    │   ├── user_sync.py     # READY / USER_UPDATE
    │   ├── channel_sync.py  # Channels, threads, DMs, overwrites
    │   ├── guild_sync.py    # Guild snapshots, emojis, stickers, bans, ...
    │   ├── member_sync.py   # Members, roles, presences
    │   ├── message_sync.py  # Messages, embeds, attachments, reactions
    │   └── partitions.py    # Per-guild ordered application
    ├── database/
    │   ├── engine.py        # SQLAlchemy engine + async helper
    │   ├── models.py        # One table per cached entity
    │   └── backend.py       # SqlBackend
    └── bot/
        ├── core.py          # discord.py client feeding the router
        └── __main__.py      # python -m mirrorcache.bot
"""

__version__ = "0.1.0"
