"""Descriptor matching."""

from .descriptor_matcher import DescriptorMatcher

__all__ = ['DescriptorMatcher']
