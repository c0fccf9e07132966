from .extraction import LLMOrderExtractor, OrderExtractor
from .interpreter import OrderTextInterpreter

__all__ = ["OrderExtractor", "LLMOrderExtractor", "OrderTextInterpreter"]
