import threading

from qqproto.intern import StringInterner


def test_returns_first_instance():
    interner = StringInterner()
    first = "".join(["ab", "c"])
    second = "".join(["a", "bc"])
    assert interner.intern(first) is first
    assert interner.intern(second) is first


def test_distinct_strings_kept_apart():
    interner = StringInterner()
    assert interner.intern("x") == "x"
    assert interner.intern("y") == "y"
    assert len(interner) == 2


def test_concurrent_interning_yields_one_instance():
    interner = StringInterner()
    results = []
    lock = threading.Lock()

    def worker(i):
        value = interner.intern("".join(["shared", "-", "key"]))
        with lock:
            results.append(value)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(results) == 16
    assert all(r is results[0] for r in results)
    assert len(interner) == 1