"""
Capability string constants for fitted models.

This module is the SINGLE SOURCE OF TRUTH for capability strings.
Import from here, never use raw strings.

Scorers check capabilities instead of branching on the engine that
produced a model:

    from pymodelselect.core.capabilities import CAPABILITY_LOG_LIKELIHOOD

    if not model.supports(CAPABILITY_LOG_LIKELIHOOD):
        raise MetricUndefinedError(...)
"""

# Point predictions via predict()
CAPABILITY_PREDICT = 'predict'

# Posterior predictive draws via predict_distribution()
CAPABILITY_PREDICTIVE_DRAWS = 'predictive_draws'

# Per-draw pointwise log-likelihood via log_likelihood()
CAPABILITY_LOG_LIKELIHOOD = 'log_likelihood'

ALL_CAPABILITIES = frozenset({
    CAPABILITY_PREDICT,
    CAPABILITY_PREDICTIVE_DRAWS,
    CAPABILITY_LOG_LIKELIHOOD,
})

__all__ = [
    'CAPABILITY_PREDICT',
    'CAPABILITY_PREDICTIVE_DRAWS',
    'CAPABILITY_LOG_LIKELIHOOD',
    'ALL_CAPABILITIES',
]
