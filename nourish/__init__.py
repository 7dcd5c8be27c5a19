"""Nourish. Recipes and dish ideas, written and illustrated by a model.

Two flows:

- A single recipe from ingredients or a dish request, with one image.
- Five dish ideas for a free-text request, each with its own image.

Nothing is hard here. The model does the cooking and the drawing.
What is left is asking it the right way and not trusting what comes back.
"""
