"""RQ worker process that runs queued design verifications."""

import logging

from rq import Worker

from server.queue import get_queue, get_redis


def main() -> None:
    """Start worker process."""
    logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    redis = get_redis()
    Worker([get_queue(redis)], connection=redis).work()


if __name__ == '__main__':
    main()
