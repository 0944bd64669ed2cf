"""
Tests for the parameter model.
"""
import logging
import math

import pytest

from enhancer import EnhancementParams, PARAM_RANGES, RangeError, validate


class TestDefaults:

    def test_defaults_are_identity(self):
        p = EnhancementParams()
        assert p.is_identity()
        assert p.quality == 90

    def test_every_field_has_a_range(self):
        assert set(PARAM_RANGES) == set(EnhancementParams().as_dict())

    def test_with_changes_returns_new_vector(self):
        p = EnhancementParams()
        q = p.with_changes(sharpen=0.5)
        assert p.sharpen == 0 and q.sharpen == 0.5
        assert not q.is_identity()

    def test_unknown_field_rejected(self):
        with pytest.raises(RangeError):
            EnhancementParams.from_mapping({"gamma": 1.2})
        with pytest.raises(RangeError):
            EnhancementParams().with_changes(gamma=1.2)


class TestValidate:

    def test_in_range_passes_through(self):
        p = EnhancementParams(brightness=150, contrast=50, saturation=0, blur=2.5,
                              sharpen=1.0, denoise=100, quality=1)
        assert validate(p) == p

    def test_clamps_and_logs_each_field(self, caplog):
        p = EnhancementParams(brightness=250, blur=-3, quality=0)
        with caplog.at_level(logging.WARNING, logger="enhancer.params"):
            v = validate(p)
        assert (v.brightness, v.blur, v.quality) == (200, 0, 1)
        text = caplog.text
        assert "brightness" in text and "blur" in text and "quality" in text
        assert "contrast" not in text

    def test_never_wraps(self):
        v = validate(EnhancementParams(denoise=1000))
        assert v.denoise == 100

    def test_strict_rejects(self):
        with pytest.raises(RangeError) as exc:
            validate(EnhancementParams(sharpen=1.5, denoise=-1), strict=True)
        assert set(exc.value.fields) == {"sharpen", "denoise"}

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_always_rejected(self, bad):
        with pytest.raises(RangeError):
            validate(EnhancementParams(contrast=bad))

    def test_non_numeric_rejected(self):
        with pytest.raises(RangeError):
            validate(EnhancementParams(blur="3"))
        with pytest.raises(RangeError):
            validate(EnhancementParams(sharpen=True))
