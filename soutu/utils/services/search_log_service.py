"""Search log service: records every image search reply the bot sends."""

from __future__ import annotations

import logging
import time
from typing import Optional

from soutu.utils.models import SearchLogModel
from soutu.utils.session import get_session

logger = logging.getLogger(__name__)


def record_search(user_id: Optional[int], chat_type: Optional[str], success: bool = True) -> None:
    with get_session(commit=True) as session:
        session.add(
            SearchLogModel(
                user_id=user_id,
                chat_type=chat_type,
                timestamp=int(time.time()),
                success=success,
            )
        )

