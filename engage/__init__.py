"""
Engage — A Points Economy for Link Sharing on Discord
======================================================
Members spend points to share links, earn points for liking, commenting
on and reposting what others share, and lose points when they go quiet
for too long.  Free-form chatter is answered by an OpenAI model that
knows the sender's balance.

Package layout::

    engage/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Presentation constants and message texts
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # users + links
    ├── engine/
    │   ├── actions.py     # ActionKind + button id parser
    │   ├── policy.py      # Costs, rewards, inactivity thresholds
    │   └── inactivity.py  # Active → Warned → Penalized state machine
    ├── services/
    │   ├── ledger_service.py       # The only writer of users/links
    │   ├── interaction_service.py  # Command logic → transport-free replies
    │   ├── activity_monitor.py     # Warning + penalty sweeps
    │   ├── assistant_service.py    # OpenAI relay with fallback
    │   └── embeds.py               # Discord embed/view builders
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        └── cogs/
            ├── meta.py      # /start, /profile
            ├── links.py     # /droplink, /browse, reward buttons
            ├── admin.py     # /stats
            ├── assistant.py # free-text relay
            └── tasks.py     # inactivity sweep loops
"""

__version__ = "0.1.0"
