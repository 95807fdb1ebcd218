"""
Dependency injection for FastAPI endpoints.
"""

import asyncio

from feedbacker.alerts.config import AlertConfig
from feedbacker.alerts.dispatcher import AlertDispatcher
from feedbacker.audio.config import AudioConfig, StorageConfig
from feedbacker.audio.store import AudioStore, create_audio_store
from feedbacker.config.settings import get_settings
from feedbacker.feedback.config import FeedbackConfig
from feedbacker.feedback.repository import FeedbackRepository
from feedbacker.observability.metrics import get_metrics
from feedbacker.pipeline.service import IngestionPipeline
from feedbacker.ratelimit.config import RateLimitConfig
from feedbacker.ratelimit.limiter import RateLimiter
from feedbacker.sentiment.config import SentimentConfig
from feedbacker.sentiment.service import SentimentAnalyzer
from feedbacker.settings_store.repository import SettingsRepository
from feedbacker.settings_store.service import SettingsCacheConfig, SettingsService
from feedbacker.storage.database import Database
from feedbacker.tagging.config import TaggingConfig
from feedbacker.tagging.extractor import TagExtractor
from feedbacker.transcription.client import AssemblyAITranscriber
from feedbacker.transcription.config import TranscriptionConfig

# Global service instances (initialized on first request)
_database: Database | None = None
_settings_service: SettingsService | None = None
_audio_store: AudioStore | None = None
_audio_store_ready = False
_pipeline: IngestionPipeline | None = None

# Initialisers await between the check and the assignment
_database_lock = asyncio.Lock()
_settings_lock = asyncio.Lock()
_pipeline_lock = asyncio.Lock()


async def get_database() -> Database:
    """Get the shared connection pool, connecting on first use."""
    global _database

    if _database is None:
        async with _database_lock:
            if _database is None:
                database = Database()
                await database.connect()
                _database = database
    return _database


async def get_feedback_repository() -> FeedbackRepository:
    return FeedbackRepository(await get_database())


async def get_settings_service() -> SettingsService:
    """Singleton so the TTL cache is shared across requests."""
    global _settings_service

    if _settings_service is None:
        async with _settings_lock:
            if _settings_service is None:
                _settings_service = SettingsService(
                    SettingsRepository(await get_database()),
                    SettingsCacheConfig(),
                    default_threshold=AlertConfig().default_threshold,
                )
    return _settings_service


def get_audio_store() -> AudioStore | None:
    """The configured store, or None when no bucket is set."""
    global _audio_store, _audio_store_ready

    if not _audio_store_ready:
        _audio_store = create_audio_store(StorageConfig())
        _audio_store_ready = True
    return _audio_store


def get_audio_config() -> AudioConfig:
    return AudioConfig()


def get_feedback_config() -> FeedbackConfig:
    return FeedbackConfig()


async def get_pipeline() -> IngestionPipeline:
    """
    Get the ingestion pipeline.

    Built once per process: the rate-limit windows and the sentiment
    backend order are in-memory state that must persist across requests.
    """
    global _pipeline

    if _pipeline is None:
        async with _pipeline_lock:
            if _pipeline is None:
                _pipeline = await _build_pipeline()
    return _pipeline


async def _build_pipeline() -> IngestionPipeline:
    settings = get_settings()
    metrics = get_metrics()
    database = await get_database()

    transcription_config = TranscriptionConfig()
    transcriber = (
        AssemblyAITranscriber(transcription_config)
        if transcription_config.configured
        else None
    )
    dispatcher = AlertDispatcher.from_config(
        AlertConfig(),
        public_base_url=settings.public_base_url,
        metrics=metrics,
    )

    return IngestionPipeline(
        limiter=RateLimiter(RateLimitConfig()),
        analyzer=SentimentAnalyzer.from_config(SentimentConfig(), metrics=metrics),
        extractor=TagExtractor(TaggingConfig()),
        repository=FeedbackRepository(database),
        store=get_audio_store(),
        transcriber=transcriber,
        dispatcher=dispatcher,
        settings=await get_settings_service(),
        audio_config=AudioConfig(),
        metrics=metrics,
    )


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _database, _settings_service, _audio_store, _audio_store_ready, _pipeline
    global _database_lock, _settings_lock, _pipeline_lock

    if _pipeline is not None:
        await _pipeline.drain()
        _pipeline = None

    _settings_service = None
    _audio_store = None
    _audio_store_ready = False

    if _database is not None:
        await _database.close()
        _database = None

    # Locks bind to the loop that first waits on them
    _database_lock = asyncio.Lock()
    _settings_lock = asyncio.Lock()
    _pipeline_lock = asyncio.Lock()
