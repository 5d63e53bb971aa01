"""Provider adapters. Concrete adapters are imported lazily by the factory."""

from pm_assistant.llm.adapters.base import BaseAdapter

__all__ = ["BaseAdapter"]
