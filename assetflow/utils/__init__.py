from .paths import path_join, glob_base, is_negated, matches, iter_matching_files

__all__ = ['path_join', 'glob_base', 'is_negated', 'matches', 'iter_matching_files']
