from maneframe.alignment.tracker import AlignmentTracker, TriggerListener

__all__ = ["AlignmentTracker", "TriggerListener"]
