from gramcore.progress import ProgressManager


class _Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _manager(total, elapsed=0.0):
    clock = _Clock()
    pm = ProgressManager(5, clock=clock)
    pm.set_total_size(total)
    clock.now += elapsed
    return pm


def test_progress_zero_total():
    pm = _manager(0)
    assert pm.get_progress(50) == 0


def test_progress_never_decreases():
    pm = _manager(200)
    high = pm.get_progress(150)
    assert pm.get_progress(50) == high
    assert pm.get_progress(200) == 100


def test_speed_without_elapsed_time():
    pm = _manager(100)
    assert pm.get_speed(100) == "0 B/s"


def test_speed_units():
    pm = _manager(10, elapsed=1.0)
    assert pm.get_speed(10).endswith(" B/s")
    assert pm.get_speed(4096).endswith(" KB/s")
    assert pm.get_speed(8 * 1024 * 1024).endswith(" MB/s")


def test_eta():
    pm = _manager(1000, elapsed=100)
    assert pm.get_eta(500) == "1m40s"
    assert pm.get_eta(1000) == "0s"


def test_full_bar():
    pm = _manager(100)
    assert pm.progress_bar(100) == "\r[" + "=" * 20 + "] 100%"


def test_half_bar():
    pm = _manager(100)
    bar = pm.progress_bar(50)
    assert bar.count("=") == 10
    assert bar.endswith("] 50%")


def test_stats_layout():
    pm = _manager(100)
    first, second = pm.get_stats(100).split("\n")
    assert first.startswith("Progress: 100.00% | ETA: ")
    assert first.endswith("| Speed: 0 B/s")
    assert second == pm.progress_bar(100)


def test_with_edit_returns_self():
    calls = []
    pm = _manager(10)
    assert pm.with_edit(lambda a, b: calls.append((a, b))) is pm
    pm.edit_func(10, 5)
    assert calls == [(10, 5)]


def test_print_func(capsys):
    pm = _manager(100)
    pm.print_func()(100, 100)
    out = capsys.readouterr().out
    assert out.startswith("Progress: 100.00%")