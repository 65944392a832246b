"""Web API for SkillForge."""
