"""AI 语义分析数据模型."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TextReplacement(BaseModel):
    """识别出的文字及其替换内容."""

    original: str
    replacement: str

    @property
    def is_effective(self) -> bool:
        """替换是否有实际内容且与原文不同."""
        return (
            self.original.strip() != ""
            and self.replacement.strip() != ""
            and self.original != self.replacement
        )


class EntityModification(BaseModel):
    """识别出的主体及其改造指令."""

    entity: str
    instruction: str = ""

    @property
    def is_effective(self) -> bool:
        """是否填写了改造指令."""
        return self.instruction.strip() != ""


class AnalysisResult(BaseModel):
    """一次图片分析的结果.

    Attributes:
        text_replacements: 文字替换列表，初始替换内容等于原文
        entity_modifications: 主体改造列表，初始指令为空
    """

    text_replacements: list[TextReplacement] = Field(default_factory=list)
    entity_modifications: list[EntityModification] = Field(default_factory=list)

    @classmethod
    def from_detections(
        cls, texts: list[str], entities: list[str]
    ) -> "AnalysisResult":
        """由识别结果构建待编辑的分析结果."""
        return cls(
            text_replacements=[TextReplacement(original=t, replacement=t) for t in texts],
            entity_modifications=[EntityModification(entity=e) for e in entities],
        )
