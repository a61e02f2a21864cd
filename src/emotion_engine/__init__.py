"""On-device emotion inference from heart-rate and RR-interval streams.

Pipeline
--------
1. **Windowed engine** (`engine.py`) buffers samples over a rolling time
   window and throttles emissions to a fixed cadence.
2. **Feature extraction** (`features.py`) computes mean HR, SDNN and RMSSD
   with RR artifact rejection.
3. **Linear classifier** (`classifier.py`) scores features against a
   pluggable parameter set and calibrates with softmax.

The built-in model uses placeholder weights; results are not clinical-grade.
"""

from emotion_engine.buffer import LockedSampleStore, SampleStore
from emotion_engine.classifier import LinearClassifier, ModelParameters, default_parameters
from emotion_engine.engine import EmotionEngine
from emotion_engine.errors import EmotionError, ErrorKind
from emotion_engine.models import BufferStats, EngineConfig, InferenceResult, Sample

__all__ = [
    "BufferStats",
    "EmotionEngine",
    "EmotionError",
    "EngineConfig",
    "ErrorKind",
    "InferenceResult",
    "LinearClassifier",
    "LockedSampleStore",
    "ModelParameters",
    "Sample",
    "SampleStore",
    "default_parameters",
]
