import concurrent.futures
import logging

from flask import current_app

logger = logging.getLogger(__name__)


def fetch_parallel(**tasks):
    """Run independent lookups concurrently and join on all of them.

    Each keyword argument is a zero-argument callable. The callables run on a
    thread pool, each inside its own application context, and the results are
    returned in a dict under the same keys. If any task raises, the first
    failure (in keyword order) is re-raised once every task has finished.
    """
    workers = current_app.config.get('PARALLEL_FETCH_WORKERS', 4)
    if workers <= 1 or len(tasks) <= 1:
        return {name: task() for name, task in tasks.items()}

    app = current_app._get_current_object()

    def run(name, task):
        with app.app_context():
            logger.debug('Fetching %s', name)
            return task()

    with concurrent.futures.ThreadPoolExecutor(max_workers=min(workers, len(tasks))) as ex:
        futures = {name: ex.submit(run, name, task) for name, task in tasks.items()}

    return {name: future.result() for name, future in futures.items()}
