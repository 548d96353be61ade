"""SummarizationOrchestrator - incremental chunked summarization with caching."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Iterable, List, Optional, Protocol, Tuple

from congress_digest.errors import (
    CacheError,
    DigestError,
    SummarizationCancelled,
    SummarizationFailure,
)
from congress_digest.status import RunState
from congress_digest.storage.summary_cache import ChunkCache, ChunkKey, DocumentCache
from .chunker import WordChunker
from .progress import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    ProgressChannel,
    ProgressEvent,
    StartEvent,
)
from .providers import SummaryProvider

logger = logging.getLogger(__name__)


class SourceFetcher(Protocol):
    async def fetch(self, url: str) -> bytes: ...


class TextExtractor(Protocol):
    def extract(self, data: bytes) -> str: ...


@dataclass(frozen=True)
class SummaryJob:
    """One document summarization request."""

    document_key: str
    pdf_url: str
    max_words: Optional[int] = None


@dataclass
class SummaryResult:
    """Final outcome of a non-streaming summarization."""

    document_key: str
    summary: str
    cached: bool
    persisted: bool
    chunk_count: int


@dataclass
class SummaryRun:
    """In-flight summarization shared by every caller for one document."""

    job: SummaryJob
    channel: ProgressChannel = field(default_factory=ProgressChannel)
    state: RunState = RunState.CHECK_DOCUMENT_CACHE
    error: Optional[BaseException] = None
    subscribers: int = 0
    task: Optional["asyncio.Task[None]"] = None
    cancel_requested: bool = False

    @property
    def finished(self) -> bool:
        return self.state.is_terminal() or (self.task is not None and self.task.done())

    @property
    def joinable(self) -> bool:
        # A run being torn down must not pick up new callers
        return not self.finished and not self.cancel_requested

    def request_cancel(self) -> None:
        self.cancel_requested = True
        if self.task is not None and not self.task.done():
            self.task.cancel()


def assemble_summary(chunks: Iterable[Tuple[int, str]], separator: str = "\n\n") -> str:
    """Join chunk summaries in index order, whatever order they arrived in."""
    return separator.join(content for _, content in sorted(chunks, key=lambda c: c[0]))


class SummarizationOrchestrator:
    """Drives one document from cache check to assembled, cached summary.

    Per request: check the Document Cache; on a miss fetch and extract the
    PDF, split it into word-bounded chunks, and for each chunk reuse the
    Chunk Cache entry or summarize and write it through. Chunk results are
    published in index order as they become available; the joined summary
    is written to the Document Cache and published last.

    Chunks run on at most ``max_concurrency`` workers (1 keeps the strictly
    sequential behaviour). Concurrent requests for the same document share
    one run. A failed chunk fails the request, but every chunk written
    before the failure stays cached, so a retry resumes where it stopped.
    """

    def __init__(
        self,
        document_cache: DocumentCache,
        chunk_cache: ChunkCache,
        provider: SummaryProvider,
        fetcher: SourceFetcher,
        extractor: TextExtractor,
        *,
        max_words: int = 20000,
        max_concurrency: int = 1,
        chunk_timeout: Optional[float] = 120.0,
        chunk_retries: int = 2,
        retry_backoff: float = 2.0,
        separator: str = "\n\n",
    ):
        """Initialize orchestrator.

        Args:
            document_cache: Whole-document summary store
            chunk_cache: Per-chunk summary store
            provider: Chunk summarizer
            fetcher: Source byte fetcher
            extractor: PDF-to-text converter
            max_words: Default words per chunk
            max_concurrency: Chunk workers per request
            chunk_timeout: Seconds allowed per summarizer attempt (None = no limit)
            chunk_retries: Extra attempts per chunk after a failure
            retry_backoff: Base delay for exponential backoff between attempts
            separator: Text placed between chunk summaries
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.document_cache = document_cache
        self.chunk_cache = chunk_cache
        self.provider = provider
        self.fetcher = fetcher
        self.extractor = extractor
        self.max_words = max_words
        self.max_concurrency = max_concurrency
        self.chunk_timeout = chunk_timeout
        self.chunk_retries = chunk_retries
        self.retry_backoff = retry_backoff
        self.separator = separator
        self._runs: Dict[str, SummaryRun] = {}

    # ==================== Public API ====================

    def in_flight(self) -> List[str]:
        """Document keys with a run in progress."""
        return [key for key, run in self._runs.items() if not run.finished]

    async def stream(
        self,
        document_key: str,
        pdf_url: str,
        *,
        max_words: Optional[int] = None,
    ) -> AsyncIterator[ProgressEvent]:
        """Yield progress events for a document, ending with a terminal event."""
        run = self._join(SummaryJob(document_key, pdf_url, max_words))
        follower = self._follow(run)
        try:
            async for event in follower:
                yield event
        finally:
            # Closing this generator must detach the subscriber immediately
            await follower.aclose()

    async def summarize_document(
        self,
        document_key: str,
        pdf_url: str,
        *,
        max_words: Optional[int] = None,
    ) -> SummaryResult:
        """Run to completion and return only the final summary.

        Raises:
            FetchError, ExtractError, SummarizationFailure: the run failed
        """
        run = self._join(SummaryJob(document_key, pdf_url, max_words))
        chunk_count = 0
        terminal: Optional[ProgressEvent] = None
        async for event in self._follow(run):
            if isinstance(event, StartEvent):
                chunk_count = event.total_chunks
            terminal = event

        if isinstance(terminal, DoneEvent):
            return SummaryResult(
                document_key=document_key,
                summary=terminal.summary,
                cached=terminal.cached,
                persisted=terminal.persisted,
                chunk_count=chunk_count,
            )
        raise run.error or SummarizationCancelled(f"Summarization of {document_key} was cancelled")

    def cancel(self, document_key: str) -> bool:
        """Stop issuing chunk calls for a document. Cached chunks are kept."""
        run = self._runs.get(document_key)
        if run is None or run.task is None or run.task.done():
            return False
        logger.info("Cancelling summarization run", extra={"document_key": document_key})
        run.request_cancel()
        return True

    # ==================== Run Management ====================

    def _join(self, job: SummaryJob) -> SummaryRun:
        key = job.document_key
        run = self._runs.get(key)
        if run is not None and run.joinable:
            logger.info(
                "Joining in-flight summarization",
                extra={"document_key": key, "subscribers": run.subscribers + 1},
            )
            requested = job.max_words or self.max_words
            running = run.job.max_words or self.max_words
            if requested != running:
                logger.warning(
                    f"Joined run splits at {running} words, not the requested {requested}",
                    extra={"document_key": key},
                )
            return run

        run = SummaryRun(job=job)
        self._runs[key] = run
        run.task = asyncio.create_task(self._execute(run), name=f"summarize:{key}")
        run.task.add_done_callback(lambda _task: self._finish(run))
        return run

    def _finish(self, run: SummaryRun) -> None:
        key = run.job.document_key
        if not run.channel.closed:
            # Cancelled, possibly before the pipeline ever started
            run.state = RunState.CANCELLED
            run.error = SummarizationCancelled(f"Summarization of {key} was cancelled")
            run.channel.publish(ErrorEvent(error="Summarization cancelled", kind="cancelled"))
        if self._runs.get(key) is run:
            del self._runs[key]

    async def _follow(self, run: SummaryRun) -> AsyncIterator[ProgressEvent]:
        run.subscribers += 1
        try:
            async for event in run.channel.subscribe():
                yield event
        finally:
            run.subscribers -= 1
            if run.subscribers == 0 and run.task is not None and not run.task.done():
                logger.info(
                    "All callers detached; stopping summarization",
                    extra={"document_key": run.job.document_key},
                )
                run.request_cancel()

    async def _execute(self, run: SummaryRun) -> None:
        key = run.job.document_key
        try:
            await self._run_pipeline(run)
        except asyncio.CancelledError:
            logger.info(
                f"Summarization cancelled in state {run.state.value}",
                extra={"document_key": key},
            )
            raise
        except DigestError as e:
            logger.warning(
                f"Summarization failed in state {run.state.value}: {e.message}",
                extra={"document_key": key, "kind": e.kind},
            )
            run.error = e
            run.state = RunState.FAILED
            run.channel.publish(ErrorEvent(error=e.message, kind=e.kind))
        except Exception as e:
            logger.error(
                "Unexpected summarization error",
                exc_info=True,
                extra={"document_key": key},
            )
            run.error = e
            run.state = RunState.FAILED
            run.channel.publish(
                ErrorEvent(error="Internal error during summarization", kind="internal_error")
            )

    # ==================== Pipeline ====================

    async def _run_pipeline(self, run: SummaryRun) -> None:
        job = run.job
        key = job.document_key

        run.state = RunState.CHECK_DOCUMENT_CACHE
        cached = await self._read_document(key)
        if cached:
            logger.info("Using cached document summary", extra={"document_key": key})
            run.state = RunState.DONE
            run.channel.publish(DoneEvent(summary=cached, cached=True, persisted=True))
            return

        logger.info("Generating new summary", extra={"document_key": key, "pdf_url": job.pdf_url})

        run.state = RunState.FETCH
        data = await self.fetcher.fetch(job.pdf_url)

        run.state = RunState.EXTRACT
        text = await asyncio.to_thread(self.extractor.extract, data)

        run.state = RunState.SPLIT
        chunker = WordChunker(job.max_words or self.max_words)
        chunks = chunker.chunk(text)
        run.channel.publish(StartEvent(total_chunks=len(chunks)))
        logger.info(
            "Prepared document text",
            extra={
                "document_key": key,
                "chunk_count": len(chunks),
                "split_key": chunker.split_key,
            },
        )

        run.state = RunState.PER_CHUNK
        results = await self._summarize_chunks(run, chunker.split_key, chunks)

        run.state = RunState.ASSEMBLE
        summary = assemble_summary(results, self.separator)

        run.state = RunState.STORE_DOCUMENT_CACHE
        persisted = await self._write_document(key, summary, job.pdf_url)

        run.state = RunState.DONE
        run.channel.publish(DoneEvent(summary=summary, cached=False, persisted=persisted))
        logger.info(
            "Completed summarization run",
            extra={"document_key": key, "summary_length": len(summary), "persisted": persisted},
        )

    async def _summarize_chunks(
        self, run: SummaryRun, split_key: str, chunks: List[str]
    ) -> List[Tuple[int, str]]:
        """Process chunks on bounded workers; publish results in index order."""
        if not chunks:
            return []

        key = run.job.document_key
        semaphore = asyncio.Semaphore(self.max_concurrency)
        stop = asyncio.Event()

        async def worker(index: int, text: str) -> Optional[Tuple[str, bool]]:
            async with semaphore:
                if stop.is_set():
                    return None
                try:
                    return await self._process_chunk(ChunkKey(key, index, split_key), text)
                except BaseException:
                    # Set before the semaphore is released so queued workers stand down
                    stop.set()
                    raise

        tasks = [
            asyncio.create_task(worker(index, text), name=f"chunk:{key}:{index}")
            for index, text in enumerate(chunks)
        ]
        results: List[Tuple[int, str]] = []
        pending = set(tasks)
        try:
            while len(results) < len(tasks):
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    task.result()
                while len(results) < len(tasks) and tasks[len(results)].done():
                    index = len(results)
                    outcome = tasks[index].result()
                    if outcome is None:
                        raise SummarizationFailure(
                            "Chunk processing stopped", chunk_index=index
                        )
                    content, from_cache = outcome
                    results.append((index, content))
                    run.channel.publish(ChunkEvent(index=index, content=content, cached=from_cache))
        finally:
            stop.set()
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        return results

    async def _process_chunk(self, chunk_key: ChunkKey, text: str) -> Tuple[str, bool]:
        cached = await self._read_chunk(chunk_key)
        if cached:
            logger.debug(
                "Using cached chunk summary",
                extra={"document_key": chunk_key.document_key, "chunk_index": chunk_key.chunk_index},
            )
            return cached, True

        content = await self._summarize_with_retry(chunk_key, text)
        await self._write_chunk(chunk_key, content)
        return content, False

    async def _summarize_with_retry(self, chunk_key: ChunkKey, text: str) -> str:
        attempts = self.chunk_retries + 1
        for attempt in range(attempts):
            try:
                if self.chunk_timeout:
                    return await asyncio.wait_for(
                        self.provider.summarize(text), timeout=self.chunk_timeout
                    )
                return await self.provider.summarize(text)
            except asyncio.TimeoutError:
                failure = SummarizationFailure(
                    f"Chunk {chunk_key.chunk_index} timed out after {self.chunk_timeout}s",
                    chunk_index=chunk_key.chunk_index,
                )
            except SummarizationFailure as e:
                failure = SummarizationFailure(
                    f"Chunk {chunk_key.chunk_index} failed: {e.message}",
                    upstream_status=e.upstream_status,
                    chunk_index=chunk_key.chunk_index,
                )

            logger.warning(
                f"Provider {self.provider.name} attempt {attempt + 1}/{attempts} failed: {failure.message}",
                extra={"document_key": chunk_key.document_key, "chunk_index": chunk_key.chunk_index},
            )
            if attempt + 1 >= attempts or not _is_retryable(failure):
                raise failure
            await asyncio.sleep(self.retry_backoff * (2 ** attempt))

        raise AssertionError("unreachable")

    # ==================== Cache Access ====================

    async def _read_document(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self.document_cache.get, key)
        except CacheError as e:
            logger.warning(
                f"Document cache read failed; treating as miss: {e.message}",
                extra={"document_key": key},
            )
            return None

    async def _write_document(self, key: str, summary: str, pdf_url: str) -> bool:
        try:
            await asyncio.to_thread(
                lambda: self.document_cache.put(
                    key, summary, pdf_url=pdf_url, prompt_version=self.provider.prompt.fingerprint
                )
            )
            return True
        except CacheError as e:
            logger.error(
                f"Document cache write failed; summary not persisted: {e.message}",
                extra={"document_key": key},
            )
            return False

    async def _read_chunk(self, chunk_key: ChunkKey) -> Optional[str]:
        try:
            return await asyncio.to_thread(self.chunk_cache.get, chunk_key)
        except CacheError as e:
            logger.warning(
                f"Chunk cache read failed; recomputing: {e.message}",
                extra={"document_key": chunk_key.document_key, "chunk_index": chunk_key.chunk_index},
            )
            return None

    async def _write_chunk(self, chunk_key: ChunkKey, content: str) -> bool:
        try:
            await asyncio.to_thread(
                lambda: self.chunk_cache.put(
                    chunk_key, content, prompt_version=self.provider.prompt.fingerprint
                )
            )
            return True
        except CacheError as e:
            logger.error(
                f"Chunk cache write failed: {e.message}",
                extra={"document_key": chunk_key.document_key, "chunk_index": chunk_key.chunk_index},
            )
            return False


def _is_retryable(failure: SummarizationFailure) -> bool:
    """Transport errors, timeouts, 429 and 5xx are worth another attempt."""
    status = failure.upstream_status
    return status is None or status == 429 or status >= 500
