from .base import Policy
from .flex_policy import FlexPolicy

__all__ = ['Policy', 'FlexPolicy']
