"""
Candidate functional forms.

Public API:
    Term, FormulaSpec           -- what to fit
    ModelFrame, FormulaDesign   -- how a formula becomes X and y
    register_transform          -- add a named elementwise transform

Example:
    >>> from pymodelselect.formula import FormulaSpec
    >>> f = FormulaSpec.parse('log(price) ~ log(carat) + clarity')
    >>> f.label
    'log(price) ~ log(carat) + clarity'
"""

from pymodelselect.formula.spec import FormulaSpec, Term
from pymodelselect.formula.design import FormulaDesign, ModelFrame, INTERCEPT
from pymodelselect.formula.transforms import TRANSFORMS, register_transform

__all__ = [
    "FormulaSpec",
    "Term",
    "FormulaDesign",
    "ModelFrame",
    "INTERCEPT",
    "TRANSFORMS",
    "register_transform",
]
