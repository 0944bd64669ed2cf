"""
Tests for the editing session and the before/after figure helper.
"""
import pytest

from enhancer import (
    CancelledError, EnhanceError, EnhancementParams, EnhancementPipeline, EnhancementSession,
    PipelineConfig, RangeError, enhance, preview,
)


class TestSession:

    def test_export_without_image(self):
        with pytest.raises(EnhanceError) as exc:
            EnhancementSession().export()
        assert exc.value.error_code == "NO_IMAGE"

    def test_preview_without_image(self):
        with pytest.raises(EnhanceError):
            EnhancementSession().render_preview()

    def test_update_and_render(self, photo):
        s = EnhancementSession(EnhancementPipeline(PipelineConfig(preview_max_side=32)))
        s.load(photo)
        params = s.update(sharpen=0.5, denoise=25)
        assert s.params == params
        out = s.render_preview()
        assert s.current_preview is out
        assert out.same_pixels(preview(photo, params, max_side=32))

    def test_update_clamps(self, photo):
        s = EnhancementSession()
        assert s.update(contrast=350).contrast == 200

    def test_strict_session_rejects(self):
        s = EnhancementSession(EnhancementPipeline(PipelineConfig(strict_params=True)))
        with pytest.raises(RangeError):
            s.update(blur=11)
        assert s.params.blur == 0

    def test_concurrent_updates_are_all_kept(self):
        import threading

        s = EnhancementSession()
        changes = [dict(brightness=150), dict(contrast=60), dict(saturation=170),
                   dict(blur=2.0), dict(sharpen=0.4), dict(denoise=30)]
        barrier = threading.Barrier(len(changes))

        def worker(change):
            barrier.wait()
            s.update(**change)

        threads = [threading.Thread(target=worker, args=(c,)) for c in changes]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert s.params == EnhancementParams(brightness=150, contrast=60, saturation=170,
                                             blur=2.0, sharpen=0.4, denoise=30)

    def test_reset(self):
        s = EnhancementSession()
        s.update(brightness=150)
        assert s.reset() == EnhancementParams()

    def test_stale_render_is_discarded(self, photo, monkeypatch):
        s = EnhancementSession()
        s.load(photo)
        real_preview = s.pipeline.preview

        def preview_then_change(raster, params, cancel=None):
            out = real_preview(raster, params, cancel=cancel)
            s.update(brightness=120)  # arrives while the render is in flight
            return out

        monkeypatch.setattr(s.pipeline, "preview", preview_then_change)
        with pytest.raises(CancelledError):
            s.render_preview()
        assert s.current_preview is None

    def test_export_is_full_resolution(self, photo):
        s = EnhancementSession(EnhancementPipeline(PipelineConfig(preview_max_side=16)))
        s.load(photo)
        s.update(denoise=50, quality=60)
        result = s.export()
        assert result.raster.same_pixels(enhance(photo, s.params))
        assert result.quality == 60


class TestVisualizer:

    def test_before_after_figure(self, photo, uniform3):
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from enhancer.viz import Visualizer

        fig = Visualizer.show_before_after(photo, uniform3, title="x", show=False)
        assert len(fig.axes) == 2
        assert fig.axes[1].get_title() == "x: enhanced (3x3)"
        plt.close(fig)
