"""
외부 해석기(모델 기반) 어댑터
"""

from .interpreters import (
    ImageInterpreter,
    NullImageInterpreter,
    NullTextInterpreter,
    OpenAIChatClient,
    OpenAIImageInterpreter,
    OpenAITextInterpreter,
    TextInterpreter,
    build_image_interpreter,
    build_text_interpreter,
)

__all__ = [
    "ImageInterpreter",
    "NullImageInterpreter",
    "NullTextInterpreter",
    "OpenAIChatClient",
    "OpenAIImageInterpreter",
    "OpenAITextInterpreter",
    "TextInterpreter",
    "build_image_interpreter",
    "build_text_interpreter",
]
