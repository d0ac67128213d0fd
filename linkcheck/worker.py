import logging
import queue
import threading
from typing import Callable, Iterable, List, Optional

from .config import FetcherConfig
from .fetcher import Fetcher
from .models import Job, Result
from .processor import JobProcessor

log = logging.getLogger(__name__)

DEFAULT_WORKERS = 5
DEFAULT_QUEUE_SIZE = 100

# end-of-stream marker, one per worker
_CLOSED = object()

ResultSink = Callable[[Result], None]
ProcessorFactory = Callable[[], JobProcessor]


def worker_loop(name: str, jobs: queue.Queue, results: queue.Queue,
                processor_factory: ProcessorFactory):
    try:
        processor = processor_factory()
    except Exception:
        # keep draining so every job still gets a result
        log.exception("Could not start processor, failing every job",
                      extra={"worker": name, "event": "worker_broken"})
        processor = None

    try:
        while True:
            job = jobs.get()
            if job is _CLOSED:
                break
            if processor is None:
                results.put(Result(original_job=job, success=False))
                continue

            log.info("Targeting job %s", job.target_url,
                     extra={"worker": name, "url": job.target_url, "event": "job_start"})
            try:
                result = processor.process(job)
            except Exception:
                log.exception("Unexpected error on %s", job.target_url,
                              extra={"worker": name, "url": job.target_url, "event": "job_error"})
                result = Result(original_job=job, success=False)
            results.put(result)
    finally:
        if processor is not None:
            processor.close()
        log.debug("Worker stopped.", extra={"worker": name})


def start_workers(count: int, jobs: queue.Queue, results: queue.Queue,
                  processor_factory: ProcessorFactory) -> List[threading.Thread]:
    """Start `count` worker threads blocked on the job queue."""
    threads = []
    for i in range(count):
        name = f"worker-{i+1}"
        t = threading.Thread(target=worker_loop, name=name,
                             args=(name, jobs, results, processor_factory), daemon=True)
        t.start()
        threads.append(t)
    log.debug("Started %d worker(s)", count)
    return threads


def run(jobs: Iterable[Job], worker_count: int, sink: ResultSink,
        config: Optional[FetcherConfig] = None,
        processor_factory: Optional[ProcessorFactory] = None,
        queue_size: int = DEFAULT_QUEUE_SIZE) -> int:
    """
    Fan `jobs` out to `worker_count` workers and hand every result to `sink`
    in completion order. Returns the number of results drained, which always
    equals the number of jobs submitted.
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be >= 1, got {worker_count}")

    if processor_factory is None:
        fetcher_config = config or FetcherConfig()

        def processor_factory():
            return JobProcessor(Fetcher(fetcher_config))

    job_queue: queue.Queue = queue.Queue(maxsize=queue_size)
    # unbounded so workers never wait on us while we are still submitting
    result_queue: queue.Queue = queue.Queue()

    threads = start_workers(worker_count, job_queue, result_queue, processor_factory)

    submitted = 0
    try:
        for job in jobs:
            job_queue.put(job)
            submitted += 1
    finally:
        for _ in threads:
            job_queue.put(_CLOSED)

    log.info("Submitted %d job(s) to %d worker(s)", submitted, worker_count,
             extra={"event": "jobs_submitted"})

    for _ in range(submitted):
        sink(result_queue.get())

    for t in threads:
        t.join()
    return submitted
