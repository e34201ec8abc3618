"""MyDishGenie: three dish recommendations per meal, from a recipe catalog and a
language model.

Most of the work is deciding what to do when something is missing. The catalog
can be empty or unreachable, the filter can leave too few dishes, the primary
model can be rate limited, and the answer can come back as prose. Every one of
those has a defined way down:

- no usable catalog -> ask the model to invent dishes;
- primary model busy -> ask the fallback model once;
- no usable answer -> hand back three catalog dishes directly.

Only when there is neither a model answer nor a catalog does the request fail.
"""
