from .time_utils import utcnow, today, ensure_aware, minutes_between, days_since

__all__ = ['utcnow', 'today', 'ensure_aware', 'minutes_between', 'days_since']
