from visitcount.models.visit import Visit

__all__ = ["Visit"]
