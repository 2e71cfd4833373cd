"""
Listing Classifier - predicts the price class of a real estate listing.

A small feedforward network is trained with mini-batch backpropagation on
standardized listing features and outputs a probability per ordinal
price band.
"""

__version__ = "1.0.0"
