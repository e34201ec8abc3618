"""Describes the MyDishGenie domain. Centres around `recommend_dishes`.

The catalog and the models both live behind other people's APIs. Neither is
trusted to be there, or to answer in the shape we asked for, so every stage
here has to be something we can fake in tests: the catalog is a protocol, the
completion client takes any `openai.AsyncClient`, and the normalizer is a pure
function of the text the model sent back.
"""
