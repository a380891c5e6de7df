from maritime_ai.workers.ml_worker import MLWorker

__all__ = ["MLWorker"]
