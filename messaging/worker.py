#!/usr/bin/env python3
"""
RQ Worker for SkillSwap event delivery.

Processes cascade events from the partition queues. Run one worker per
partition so each aggregate's events are taken in emission order.

Usage:
    python -m messaging.worker
    python -m messaging.worker --partition 2
    python -m messaging.worker --burst
    python -m messaging.worker --verbose
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from redis import Redis
from rq import Worker

from core.config_loader import MessagingConfig, load_config
from messaging.bus import RedisQueueEventBus

logger = logging.getLogger(__name__)


def queues_for(messaging: MessagingConfig, partition: Optional[int] = None) -> List[str]:
    """Queue names to listen on: one partition, or all of them."""
    bus = RedisQueueEventBus(messaging)
    if partition is None:
        return bus.queue_names()
    if partition < 0 or partition >= max(1, messaging.partitions):
        raise ValueError(f"Partition {partition} out of range (0..{messaging.partitions - 1})")
    return [bus.queue_name(partition)]


def start_worker(messaging: MessagingConfig, burst: bool = False, queues: Optional[List[str]] = None):
    """Start the RQ worker."""
    redis_url = messaging.redis_url

    if queues is None:
        queues = queues_for(messaging)

    logger.info("Starting RQ Worker")
    logger.info(f"Redis URL: {redis_url}")
    logger.info(f"Queues: {', '.join(queues)}")
    logger.info(f"Burst mode: {burst}")

    try:
        redis_conn = Redis.from_url(redis_url)
        redis_conn.ping()
        logger.info("Connected to Redis")

        worker = Worker(queues, connection=redis_conn)

        if burst:
            logger.info("Running in burst mode...")
            worker.work(burst=True)
        else:
            logger.info("Worker started. Press Ctrl+C to stop.")
            worker.work()

    except KeyboardInterrupt:
        logger.info("Worker stopped")
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(description='SkillSwap Event Worker')
    parser.add_argument('--burst', action='store_true', help='Process all and exit')
    parser.add_argument('--partition', type=int, default=None, help='Only listen on this partition queue')
    parser.add_argument('--config', default=os.environ.get('SKILLSWAP_CONFIG', 'config.yaml'))
    parser.add_argument('--verbose', action='store_true')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    messaging = load_config(args.config).messaging
    start_worker(messaging, burst=args.burst, queues=queues_for(messaging, args.partition))


if __name__ == '__main__':
    main()
