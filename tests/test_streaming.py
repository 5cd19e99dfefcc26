import threading

import pytest

from zenith_tracker.ai.streaming import Generation, GenerationCancelled, YieldingStream


def test_generation_result_after_exhaustion():
    gen = Generation(iter(["Hel", "lo"]))
    with pytest.raises(RuntimeError):
        gen.result
    assert list(gen) == ["Hel", "lo"]
    assert gen.done
    assert gen.result == "Hello"


def test_yielding_stream_pauses_every_n_tokens():
    pauses = []
    stream = YieldingStream(iter(str(i) for i in range(20)), every=8, pause=lambda: pauses.append(1))
    assert len(list(stream)) == 20
    assert len(pauses) == 2


def test_yielding_stream_cancels_and_closes_source():
    closed = []

    def tokens():
        try:
            for i in range(100):
                yield str(i)
        finally:
            closed.append(True)

    cancel = threading.Event()
    seen = []
    stream = YieldingStream(tokens(), every=4, pause=lambda: None, cancel=cancel)
    with pytest.raises(GenerationCancelled):
        for token in stream:
            seen.append(token)
            if len(seen) == 3:
                cancel.set()
    assert seen == ["0", "1", "2"]
    assert closed == [True]


def test_yielding_stream_rejects_bad_interval():
    with pytest.raises(ValueError):
        YieldingStream(iter([]), every=0)
