"""SkillForge: LLM-backed learning API."""

__version__ = "0.1.0"
