import logging
import datetime
from typing import Any, Optional

from pymongo.errors import PyMongoError

from db_mongo import AUDIT_COL, get_col
from settings import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("potions")


def write_audit(action: str, username: str, potion_id: str, before: Optional[dict[str, Any]], after: Optional[dict[str, Any]]) -> None:
    try:
        get_col(AUDIT_COL).insert_one({
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "user": username, "action": action, "potion_id": potion_id,
            "before": before, "after": after
        })
    except PyMongoError:
        logger.exception("audit write failed for %s on %s", action, potion_id)
