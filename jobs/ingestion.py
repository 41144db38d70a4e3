from services.database import FollowUpRepository
from connectors.base import SourceConnector, ConnectorError
from processors.normalizer import Normalizer
from models.follow_up import utc_now
from models.raw_task import BoardConfig
from models.job_result import IngestionResult, IngestionFailure, BoardRun
from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional
import logging
import time

logger = logging.getLogger(__name__)


class IngestionJob:
    """Scrape boards, normalize their rows and upsert follow-ups

    Boards are scraped one after another; each connector owns a single
    browser session for the boards of its source. A board that fails is
    recorded and skipped, the rest of the run carries on.
    """

    def __init__(
        self,
        repository: FollowUpRepository,
        connectors: Dict[str, SourceConnector],
        normalizer: Normalizer = None,
    ):
        self.repository = repository
        self.connectors = connectors
        self.normalizer = normalizer or Normalizer()

    def run(self, boards: List[BoardConfig], now: Optional[datetime] = None) -> IngestionResult:
        """Run one ingestion over the given boards

        Raises:
            RepositoryUnavailableError: the follow-up store cannot be reached
        """
        now = now or utc_now()
        start_time = time.time()

        logger.info(f"🚀 Starting sync of {len(boards)} boards")

        # Fail before scraping when the store is unreachable
        self.repository.check_connection()

        result = IngestionResult()

        by_source: Dict[str, List[BoardConfig]] = OrderedDict()
        for board in boards:
            by_source.setdefault(board.source, []).append(board)

        for source, source_boards in by_source.items():
            connector = self.connectors.get(source)
            if connector is None:
                for board in source_boards:
                    self._record_board_failure(result, board, f"No connector configured for {source}")
                continue

            with connector:
                for board in source_boards:
                    self._ingest_board(connector, board, now, result)

        result.summary["total"] = sum(b.items for b in result.boards)
        result.message = (
            f"Synced {result.imported} follow-ups from {len(result.boards)} boards "
            f"({result.failed} failures)"
        )

        elapsed = time.time() - start_time
        logger.info(f"📊 TOTAL TASKS FOUND: {result.summary['total']}, imported {result.imported} in {elapsed:.2f}s")
        return result

    def _ingest_board(
        self, connector: SourceConnector, board: BoardConfig, now: datetime, result: IngestionResult
    ):
        try:
            raw_tasks = connector.fetch(board)
        except ConnectorError as e:
            logger.error(f"❌ Failed to scrape {board.name}: {e}")
            self._record_board_failure(result, board, str(e))
            return
        except Exception as e:
            logger.error(f"❌ Unexpected error scraping {board.name}: {e}", exc_info=True)
            self._record_board_failure(result, board, str(e))
            return

        follow_ups, normalize_failures = self.normalizer.normalize_many(raw_tasks, board, now=now)

        for raw_task, error in normalize_failures:
            result.failed += 1
            result.details.append(IngestionFailure(board=board.name, item=raw_task.name, error=error))

        imported = 0
        for follow_up in follow_ups:
            try:
                self.repository.upsert(follow_up)
            except Exception as e:
                logger.error(f"Failed to save follow-up {follow_up.id}: {e}")
                result.failed += 1
                result.details.append(IngestionFailure(board=board.name, item=follow_up.title, error=str(e)))
                continue
            imported += 1
            result.follow_ups.append(follow_up)

        result.imported += imported
        result.summary[board.key] = len(raw_tasks)
        result.boards.append(BoardRun(
            key=board.key,
            name=board.name,
            source=board.source,
            status="ok",
            items=len(raw_tasks),
            imported=imported,
        ))
        logger.info(f"💾 Saved {imported}/{len(raw_tasks)} follow-ups from {board.name}")

    def _record_board_failure(self, result: IngestionResult, board: BoardConfig, error: str):
        result.summary[board.key] = 0
        result.boards.append(BoardRun(
            key=board.key,
            name=board.name,
            source=board.source,
            status="failed",
            error=error,
        ))
        result.details.append(IngestionFailure(board=board.name, error=error))
