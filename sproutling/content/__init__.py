from sproutling.content.curriculum import (
    CurriculumData,
    CurriculumProvider,
    JsonCurriculumLoader,
    LevelData,
    StaticCurriculum,
    fallback_cards,
)

__all__ = [
    "CurriculumData",
    "CurriculumProvider",
    "JsonCurriculumLoader",
    "LevelData",
    "StaticCurriculum",
    "fallback_cards",
]
