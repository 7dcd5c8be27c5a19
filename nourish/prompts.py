from nourish.models import GenerationRequest, RequestType


HEALTH_FOCUS = (
    "The description must focus on the health benefits and vitamins of the key "
    'ingredients (e.g., "This dish is rich in Vitamin A from carrots, which is '
    'great for eye health.").'
)

LANGUAGE = (
    "The entire recipe, including all text and ingredient names, must be in {language}."
)

FROM_INGREDIENTS = "Create a detailed recipe using the following ingredients: {value}."

FROM_DISH = "Create a detailed recipe for the following dish: {value}."

SUGGESTIONS = (
    'Based on the user request "{request}", generate {n} distinct dish ideas. '
    'Provide only a JSON array of objects, where each object has "dishName" and '
    '"description". The entire response must be in {language}.'
)

DISH_IMAGE = (
    'Generate a photorealistic, delicious-looking image of a dish called "{name}". '
    "Context: {description}"
)


class RecipePrompt:
    def __init__(self, request: GenerationRequest, language: str) -> None:
        self.request = request
        self.language = language

    def __str__(self) -> str:
        opening = (
            FROM_INGREDIENTS
            if self.request.type is RequestType.ingredients
            else FROM_DISH
        )
        return " ".join(
            [
                opening.format(value=self.request.value),
                HEALTH_FOCUS,
                LANGUAGE.format(language=self.language),
            ]
        )


def suggestions_prompt(request: str, language: str, *, n: int = 5) -> str:
    return SUGGESTIONS.format(request=request, n=n, language=language)


def dish_image_prompt(name: str, description: str) -> str:
    return DISH_IMAGE.format(name=name, description=description)
