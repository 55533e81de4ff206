"""
Application Wiring

Builds storage, store, engine and session from configuration and runs
the interactive menu on the console.
"""

from typing import Optional

from .accounts import AccountStore
from .config import BankConfig, get_config
from .interaction import ConsoleInteraction, InteractionPort
from .logging_config import get_logger, setup_logging
from .session import BankSession
from .storage import SnapshotStorage, create_storage
from .transactions import BalanceEngine


logger = get_logger("pocket_bank.app")


def build_session(config: Optional[BankConfig] = None,
                  storage: Optional[SnapshotStorage] = None,
                  io: Optional[InteractionPort] = None) -> BankSession:
    """
    Create a ready-to-run session

    Args:
        config: Configuration (defaults to the global configuration)
        storage: Snapshot storage (defaults to the configured backend)
        io: Interaction port (defaults to the console)

    Returns:
        BankSession with its store restored from storage
    """
    config = config or get_config()
    storage = storage or create_storage(config)
    store = AccountStore.open(storage, config)
    engine = BalanceEngine(store, amount_precision=config.amount_precision)
    return BankSession(store, engine, io or ConsoleInteraction())


def main() -> int:
    """Console entry point"""
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format, log_file=config.log_file)

    session = build_session(config)
    logger.info("Session started with %d accounts", len(session.store))
    try:
        session.run()
    except (EOFError, KeyboardInterrupt):
        print("\nSee you next time!")
    finally:
        session.store.storage.close()
    return 0
