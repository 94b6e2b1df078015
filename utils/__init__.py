"""
Text helpers shared by the parsers and the similarity scorer.
"""
