"""
Total Goals Regression Package

Linear models predicting total goals (goals for + against) in a football
match from shots, expected goals and set pieces, using FBref match logs.
"""

from .data import load_matches
from .features import derive_features, validate_matches
from .split import stratified_split
from .model import fit_linear, fit_model, fit_model_bank, load_model, save_model
from .optimize import fit_ridge, cross_validate_ridge, fit_ridge_cv
from .evaluate import rmse, evaluate_model, comparison_table

__all__ = [
    'load_matches',
    'derive_features',
    'validate_matches',
    'stratified_split',
    'fit_linear',
    'fit_model',
    'fit_model_bank',
    'load_model',
    'save_model',
    'fit_ridge',
    'cross_validate_ridge',
    'fit_ridge_cv',
    'rmse',
    'evaluate_model',
    'comparison_table',
]
