"""
Unit tests for watermark management
"""

import pytest
from core.exceptions import TransientStoreError, CheckpointError, RetryableError
from conftest import EPOCH0, WINDOW, CHECKPOINT_ID


class TestInitialize:
    """Test idempotent watermark seeding"""
    
    @pytest.mark.asyncio
    async def test_initialize_seeds_empty_store(self, checkpoint_manager, checkpoint_store):
        written = await checkpoint_manager.initialize()
        
        assert written is True
        assert checkpoint_store.items == {CHECKPOINT_ID: {"timestamp": EPOCH0 - WINDOW}}
    
    @pytest.mark.asyncio
    async def test_initialize_twice_writes_once(self, checkpoint_manager, checkpoint_store):
        await checkpoint_manager.initialize()
        first_read = await checkpoint_manager.read()
        
        written_again = await checkpoint_manager.initialize()
        second_read = await checkpoint_manager.read()
        
        assert written_again is False
        assert len(checkpoint_store.writes) == 1
        assert first_read == second_read == EPOCH0 - WINDOW
    
    @pytest.mark.asyncio
    async def test_initialize_keeps_existing_watermark(self, checkpoint_manager, checkpoint_store):
        checkpoint_store.items[CHECKPOINT_ID] = {"timestamp": EPOCH0 + 5 * WINDOW}
        
        await checkpoint_manager.initialize()
        
        assert checkpoint_store.writes == []
        assert checkpoint_store.watermark() == EPOCH0 + 5 * WINDOW
    
    @pytest.mark.asyncio
    async def test_initialize_read_failure_is_reported(self, checkpoint_manager, checkpoint_store):
        checkpoint_store.fail_get = True
        
        with pytest.raises(TransientStoreError) as exc_info:
            await checkpoint_manager.initialize()
        
        assert exc_info.value.context["operation"] == "initialize"
        assert isinstance(exc_info.value.original_exception, ConnectionError)
        assert checkpoint_store.writes == []
    
    @pytest.mark.asyncio
    async def test_initialize_write_failure_can_be_retried(self, checkpoint_manager, checkpoint_store):
        checkpoint_store.fail_put = True
        
        with pytest.raises(TransientStoreError):
            await checkpoint_manager.initialize()
        assert checkpoint_store.watermark() is None
        
        checkpoint_store.fail_put = False
        assert await checkpoint_manager.initialize() is True
        assert checkpoint_store.watermark() == EPOCH0 - WINDOW


class TestRead:
    """Test watermark reads and the degraded fallback"""
    
    @pytest.mark.asyncio
    async def test_read_returns_stored_watermark(self, checkpoint_manager, checkpoint_store):
        checkpoint_store.items[CHECKPOINT_ID] = {"timestamp": 42}
        
        assert await checkpoint_manager.read() == 42
    
    @pytest.mark.asyncio
    async def test_read_falls_back_without_persisting(self, checkpoint_manager, checkpoint_store, clock):
        watermark = await checkpoint_manager.read()
        
        assert watermark == clock.now - WINDOW
        assert checkpoint_store.writes == []
        assert await checkpoint_manager.stored_watermark() is None
    
    @pytest.mark.asyncio
    async def test_read_failure_raises_transient_store_error(self, checkpoint_manager, checkpoint_store):
        checkpoint_store.fail_get = True
        
        with pytest.raises(TransientStoreError) as exc_info:
            await checkpoint_manager.read()
        
        error = exc_info.value
        assert isinstance(error, CheckpointError)
        assert isinstance(error, RetryableError)
        assert error.context["checkpoint_id"] == CHECKPOINT_ID


class TestAdvance:
    """Test watermark advancement"""
    
    @pytest.mark.asyncio
    async def test_advance_overwrites_unconditionally(self, checkpoint_manager, checkpoint_store):
        checkpoint_store.items[CHECKPOINT_ID] = {"timestamp": 500}
        
        await checkpoint_manager.advance(100)
        
        assert checkpoint_store.watermark() == 100
    
    @pytest.mark.asyncio
    async def test_advance_failure_leaves_old_watermark(self, checkpoint_manager, checkpoint_store):
        checkpoint_store.items[CHECKPOINT_ID] = {"timestamp": 500}
        checkpoint_store.fail_put = True
        
        with pytest.raises(TransientStoreError) as exc_info:
            await checkpoint_manager.advance(60500)
        
        assert exc_info.value.context["checkpoint_value"] == 60500
        assert exc_info.value.context["operation"] == "advance"
        assert checkpoint_store.watermark() == 500
    
    def test_error_dict_carries_context(self):
        error = TransientStoreError(
            "Failed to write watermark",
            context={"checkpoint_id": CHECKPOINT_ID},
            original_exception=ConnectionError("down")
        )
        
        data = error.to_dict()
        
        assert data["error_type"] == "TransientStoreError"
        assert data["context"]["checkpoint_id"] == CHECKPOINT_ID
        assert data["original_error"] == "down"
        assert "Caused by: ConnectionError: down" in str(error)
