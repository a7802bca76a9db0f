from legalflow.events.broadcaster import ProgressBroadcaster, Subscription
from legalflow.events.models import ProgressEvent, ProgressStage

__all__ = ["ProgressBroadcaster", "ProgressEvent", "ProgressStage", "Subscription"]
