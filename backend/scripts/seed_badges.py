#!/usr/bin/env python3
"""
Script CLI pour (ré)initialiser le catalogue de badges
Remplace le catalogue existant par les 9 badges par défaut
"""
import argparse
import logging
import sys
from pathlib import Path

# Ajouter le répertoire backend au path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from app.core.database import get_session
from app.domain.services.badge_service import badge_service, DEFAULT_BADGE_CATALOG
from app.main import startup

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialise le catalogue de badges Healthify")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Affiche le catalogue par défaut sans écrire en base",
    )
    args = parser.parse_args(argv)

    if args.dry_run:
        for entry in DEFAULT_BADGE_CATALOG:
            print(f"{entry['name']:<16} {entry['criteria_type']:<17} >= {entry['criteria_value']} ({entry['tier']})")
        return 0

    startup()
    session = next(get_session())
    try:
        badges = badge_service.seed_default_catalog(session)
    finally:
        session.close()

    logger.info(f"🎉 {len(badges)} badges en base")
    return 0


if __name__ == "__main__":
    sys.exit(main())
