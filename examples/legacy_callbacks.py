"""Driving callback-style APIs from generators.

This example shows how an old error-first callback API can be adapted with
promisify_all and then composed with plain generators:

- ``promisify_all`` adds ``*_async`` variants returning futures
- a generator yields those futures and gets the results back
- yielding a list of generators runs them side by side

Run with: uv run python examples/legacy_callbacks.py
"""

import threading
from types import SimpleNamespace

from costep import promisify_all, run


def _lookup(user_id, callback):
    threading.Timer(0.05, callback, args=(None, {"id": user_id, "name": f"user-{user_id}"})).start()


def _count_posts(user, callback):
    # Legacy API: the count is passed in the error slot.
    callback(len(user["name"]))


legacy = promisify_all(SimpleNamespace(lookup=_lookup, count_posts=_count_posts))

report: dict[int, int] = {}


def summarize(user_id):
    user = yield legacy.lookup_async(user_id)
    report[user_id] = yield legacy.count_posts_async(user)


def build_report(user_ids):
    # Combinators fulfil with None: results are collected in ``report``.
    yield [summarize(user_id) for user_id in user_ids]
    return dict(sorted(report.items()))


if __name__ == "__main__":
    print(run(build_report([1, 2, 30])))
