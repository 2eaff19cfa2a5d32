import threading

from flowpatch.errors import GraphVersionConflict

from backend.tests.factories import annotate, batch, scenario_a


def _race(submit, workers: int):
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def _worker(index: int) -> None:
        barrier.wait()
        try:
            result = submit(index)
        except GraphVersionConflict as exc:
            outcome = ("conflict", exc.current_version)
        else:
            outcome = ("ok", result.new_version)
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return outcomes


def test_concurrent_submits_with_same_version_yield_one_success(service, store):
    service.submit_batch("wf", 0, scenario_a())

    outcomes = _race(
        lambda i: service.submit_batch("wf", 1, batch(annotate("n1", f"writer {i}"))),
        workers=8,
    )

    assert sorted(kind for kind, _ in outcomes).count("ok") == 1
    assert all(version == 2 for _, version in outcomes)
    assert store.version("wf") == 2
    assert len(store.get("wf").get_node("n1").notes) == 1


def test_first_submit_race_on_a_new_graph(service, store):
    outcomes = _race(lambda i: service.submit_batch("fresh", 0, scenario_a()), workers=4)

    assert [kind for kind, _ in outcomes].count("ok") == 1
    assert store.version("fresh") == 1


def test_different_graphs_do_not_conflict(service, store):
    outcomes = _race(
        lambda i: service.submit_batch(f"wf-{i}", 0, scenario_a()),
        workers=6,
    )

    assert all(kind == "ok" for kind, _ in outcomes)
    assert all(store.version(f"wf-{i}") == 1 for i in range(6))
