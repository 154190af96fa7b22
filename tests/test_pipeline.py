"""Tests for spriteguard.pipeline — the forge orchestrator.

Every test drives the pipeline with a fake executor, so no image model
or network access is involved.
"""

from __future__ import annotations

import asyncio
import logging

import pytest
from fake_executors import (
    CorruptingExecutor,
    ErasingExecutor,
    FailingExecutor,
    IdentityExecutor,
    RepaintExecutor,
    ResizingExecutor,
    SlowExecutor,
)
from sprite_factory import BLACK, RED, TRANSPARENT, make_sprite, opaque_pixels

from spriteguard.assembler import mirror_horizontal
from spriteguard.cleanup import alpha_clean, isolate_background
from spriteguard.config import ForgeSettings
from spriteguard.errors import DimensionMismatchError, IdentityDriftError
from spriteguard.extraction import build_identity_hash, build_silhouette_mask
from spriteguard.models import PixelData
from spriteguard.observability import ForgeMetricsCollector
from spriteguard.pipeline import analyze_identity, forge_sprite, process_game_ready
from spriteguard.pixels import clone
from spriteguard.prompts import build_directive


async def _forge(sprite: PixelData, executor, **kwargs):
    return await forge_sprite(
        base_image=sprite,
        outfit="plate armor",
        class_type="Paladin",
        theme="frozen citadel",
        executor=executor,
        **kwargs,
    )


def _cleaned(sprite: PixelData) -> PixelData:
    return isolate_background(alpha_clean(clone(sprite)))


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestForgeAccepted:
    """Forges whose synthesis respects silhouette and pose."""

    @pytest.mark.asyncio
    async def test_identity_executor(self, sprite: PixelData) -> None:
        executor = IdentityExecutor()
        result = await _forge(sprite, executor)

        assert result.image.size == (32, 32)
        assert result.drift == 1.0
        assert result.identity == build_identity_hash(_cleaned(sprite))
        assert result.metadata.engine == "identity"
        assert result.metadata.integrity_score == 1.0
        assert result.metadata.frame_count == 1
        assert not result.metadata.sheet_mode

    @pytest.mark.asyncio
    async def test_executor_receives_directive_and_mask(self, sprite: PixelData) -> None:
        executor = IdentityExecutor()
        await _forge(sprite, executor)

        assert len(executor.calls) == 1
        call = executor.calls[0]
        assert call["directive"] == build_directive(
            "plate armor", "Paladin", "frozen citadel"
        )
        assert call["mask"] == build_silhouette_mask(_cleaned(sprite))
        assert call["base_image"] is not sprite

    @pytest.mark.asyncio
    async def test_output_is_outlined_body(self, sprite: PixelData) -> None:
        result = await _forge(sprite, IdentityExecutor())
        img = result.image

        assert img.get_pixel(0, 0)[3] == 0
        assert img.get_pixel(10, 15) == BLACK
        assert img.get_pixel(21, 15) == BLACK
        assert img.get_pixel(15, 2) == BLACK
        assert img.get_pixel(15, 15) == RED

    @pytest.mark.asyncio
    async def test_repaint_inside_silhouette_is_harmonized(
        self, sprite: PixelData
    ) -> None:
        result = await _forge(sprite, RepaintExecutor(rows=(5, 10), columns=(12, 20)))

        assert result.drift == pytest.approx(1 - 40 / 1024)
        for x, y in opaque_pixels(result.image):
            assert result.image.get_pixel(x, y) in (RED, BLACK)

    @pytest.mark.asyncio
    async def test_pose_shift_at_tolerance_passes(self, sprite: PixelData) -> None:
        # Erasing columns 10-15 moves each scanline center from 15.5 to 18.5.
        result = await _forge(sprite, ErasingExecutor(columns=(10, 16)))

        assert result.drift == 1.0
        assert result.image.get_pixel(12, 15)[3] == 0

    @pytest.mark.asyncio
    async def test_async_callable_executor(self, sprite: PixelData) -> None:
        async def repaint_nothing(directive, image, mask):
            return image

        result = await _forge(sprite, repaint_nothing)
        assert result.metadata.engine == "repaint_nothing"

    @pytest.mark.asyncio
    async def test_custom_settings(self, sprite: PixelData) -> None:
        settings = ForgeSettings(pose_tolerance=5, outline_color=(10, 20, 30))
        result = await _forge(
            sprite, ErasingExecutor(columns=(10, 18)), settings=settings
        )
        assert result.image.get_pixel(18, 15) == (10, 20, 30, 255)


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


class _KeepingExecutor(IdentityExecutor):
    def transform(self, img: PixelData) -> PixelData:
        self.returned = img
        self.returned_bytes = bytes(img.data)
        return img


class TestOwnership:
    """The caller's and the executor's buffers are never rewritten."""

    @pytest.mark.asyncio
    async def test_base_image_not_mutated(self, sprite: PixelData) -> None:
        before = bytes(sprite.data)
        await _forge(sprite, IdentityExecutor())
        assert bytes(sprite.data) == before

    @pytest.mark.asyncio
    async def test_executor_output_not_mutated(self, sprite: PixelData) -> None:
        executor = _KeepingExecutor()
        result = await _forge(sprite, executor)

        assert bytes(executor.returned.data) == executor.returned_bytes
        assert result.image.data is not executor.returned.data


# ---------------------------------------------------------------------------
# Rejections and failures
# ---------------------------------------------------------------------------


class TestForgeRejected:
    """Forges that must fail closed."""

    @pytest.mark.asyncio
    async def test_background_change_raises_drift(self, sprite: PixelData) -> None:
        with pytest.raises(IdentityDriftError) as excinfo:
            await _forge(sprite, CorruptingExecutor(0, 0))

        err = excinfo.value
        assert err.code == "IDENTITY_DRIFT"
        assert str(err).startswith("IDENTITY_DRIFT")
        assert err.verdict.violations == 1
        assert not err.verdict.drift_ok

    @pytest.mark.asyncio
    async def test_pose_shift_beyond_tolerance_raises(self, sprite: PixelData) -> None:
        # Centers move from 15.5 to 19.5, one pixel past the tolerance.
        with pytest.raises(IdentityDriftError) as excinfo:
            await _forge(sprite, ErasingExecutor(columns=(10, 18)))

        verdict = excinfo.value.verdict
        assert verdict.drift_ok
        assert not verdict.pose_ok

    @pytest.mark.asyncio
    async def test_dimension_mismatch(self, sprite: PixelData) -> None:
        with pytest.raises(DimensionMismatchError, match="Expected 32x32"):
            await _forge(sprite, ResizingExecutor())

    @pytest.mark.asyncio
    async def test_executor_error_propagates_unchanged(
        self, sprite: PixelData
    ) -> None:
        error = RuntimeError("quota exceeded")
        with pytest.raises(RuntimeError) as excinfo:
            await _forge(sprite, FailingExecutor(error))
        assert excinfo.value is error

    @pytest.mark.asyncio
    async def test_non_callable_executor_rejected(self, sprite: PixelData) -> None:
        with pytest.raises(TypeError, match="SynthesisExecutor"):
            await _forge(sprite, "not an executor")


# ---------------------------------------------------------------------------
# Sheet mode
# ---------------------------------------------------------------------------


class TestSheetMode:
    """Forges that also assemble a pose sheet."""

    @pytest.mark.asyncio
    async def test_sheet_is_base_plus_mirror(self, sprite: PixelData) -> None:
        single = await _forge(sprite, IdentityExecutor())
        result = await _forge(sprite, IdentityExecutor(), sheet_mode=True)

        assert result.image.size == (64, 32)
        assert result.metadata.sheet_mode
        assert result.metadata.frame_count == 2
        mirrored = mirror_horizontal(single.image)
        for y in range(32):
            for x in range(32):
                assert result.image.get_pixel(x, y) == single.image.get_pixel(x, y)
                assert result.image.get_pixel(32 + x, y) == mirrored.get_pixel(x, y)


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestConcurrency:
    """Independent forges may run concurrently."""

    @pytest.mark.asyncio
    async def test_gathered_forges_are_independent(self, sprite: PixelData) -> None:
        executors = [SlowExecutor(delay=0.01 * (3 - i)) for i in range(3)]
        results = await asyncio.gather(*(_forge(sprite, e) for e in executors))

        assert all(r.image == results[0].image for r in results)
        assert all(len(e.calls) == 1 for e in executors)

    @pytest.mark.asyncio
    async def test_one_failure_does_not_affect_others(self, sprite: PixelData) -> None:
        results = await asyncio.gather(
            _forge(sprite, SlowExecutor()),
            _forge(sprite, CorruptingExecutor()),
            return_exceptions=True,
        )
        assert results[0].drift == 1.0
        assert isinstance(results[1], IdentityDriftError)


# ---------------------------------------------------------------------------
# Metrics and audit trail
# ---------------------------------------------------------------------------


class TestForgeReporting:
    """Outcomes are recorded in metrics and in the audit log."""

    @pytest.mark.asyncio
    async def test_metrics_record_every_outcome(self, sprite: PixelData) -> None:
        metrics = ForgeMetricsCollector()
        await _forge(sprite, IdentityExecutor(), metrics=metrics)
        with pytest.raises(IdentityDriftError):
            await _forge(sprite, CorruptingExecutor(), metrics=metrics)
        with pytest.raises(RuntimeError):
            await _forge(sprite, FailingExecutor(RuntimeError("down")), metrics=metrics)

        snap = metrics.snapshot()
        assert snap["forges_total"] == 3
        assert snap["outcomes"] == {"success": 1, "identity_drift": 1, "error": 1}
        assert snap["last_failure"] == "RuntimeError: down"

    @pytest.mark.asyncio
    async def test_audit_success(
        self, sprite: PixelData, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="spriteguard.audit"):
            await _forge(sprite, IdentityExecutor())

        audit = [r for r in caplog.records if r.name == "spriteguard.audit"]
        assert len(audit) == 1
        assert "requester=anonymous" in audit[0].getMessage()
        assert "status=SUCCESS" in audit[0].getMessage()

    @pytest.mark.asyncio
    async def test_audit_failure_uses_requester(
        self, sprite: PixelData, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings = ForgeSettings(requester="guild-master")
        with caplog.at_level(logging.INFO, logger="spriteguard.audit"):
            with pytest.raises(IdentityDriftError):
                await _forge(sprite, CorruptingExecutor(), settings=settings)

        messages = [r.getMessage() for r in caplog.records if r.name == "spriteguard.audit"]
        assert messages == [
            "[FORGE_AUDIT] requester=guild-master | directive=You are a pixel art sprite sur... | status=FAILURE"
        ]

    @pytest.mark.asyncio
    async def test_rejection_logged_as_warning(
        self, sprite: PixelData, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="spriteguard.pipeline"):
            with pytest.raises(IdentityDriftError):
                await _forge(sprite, CorruptingExecutor())
        assert any("Forge rejected" in r.getMessage() for r in caplog.records)


# ---------------------------------------------------------------------------
# Standalone entry points
# ---------------------------------------------------------------------------


class TestAnalyzeIdentity:
    """Tests for read-only identity inspection."""

    def test_report(self, transparent_sprite: PixelData) -> None:
        before = bytes(transparent_sprite.data)
        report = analyze_identity(transparent_sprite)

        assert report.hash == build_identity_hash(transparent_sprite)
        assert report.skeleton.head[0] == pytest.approx(15.5)
        assert report.edge_pixels > 0
        assert 0.0 < report.ratios.head <= 1.0
        assert bytes(transparent_sprite.data) == before


class TestProcessGameReady:
    """Tests for the cleanup-only chain."""

    def test_background_removed_body_kept(self, sprite: PixelData) -> None:
        result = process_game_ready(sprite)

        assert result.get_pixel(0, 0)[3] == 0
        assert result.get_pixel(15, 15) == RED
        assert len(opaque_pixels(result)) == 12 * 28

    def test_input_not_mutated(self, sprite: PixelData) -> None:
        before = bytes(sprite.data)
        process_game_ready(sprite)
        assert bytes(sprite.data) == before

    def test_alpha_is_binary(self) -> None:
        img = make_sprite(8, 8, body=(2, 2, 6, 6), background=TRANSPARENT)
        img.set_pixel(3, 3, (255, 0, 0, 100))
        img.set_pixel(4, 4, (255, 0, 0, 200))
        result = process_game_ready(img)
        assert result.get_pixel(3, 3)[3] == 0
        assert result.get_pixel(4, 4)[3] == 255

    def test_target_palette_applied(self, sprite: PixelData) -> None:
        result = process_game_ready(sprite, target_palette=[(0, 0, 250), (200, 0, 50)])
        assert result.get_pixel(15, 15) == (200, 0, 50, 255)
