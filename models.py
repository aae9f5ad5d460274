from enum import Enum


class Category(str, Enum):
    food_drink = "Food & Drink"
    transportation = "Transportation"
    shopping = "Shopping"
    bills = "Bills"
    health = "Health"
    entertainment = "Entertainment"
    education = "Education"
    other = "Other"


# Declaration order is the order shown in the form and the filter bar.
CATEGORIES: list[str] = [member.value for member in Category]


LOAD_ERROR_MESSAGE = "Failed to load expenses"
SUBMIT_ERROR_MESSAGE = "Failed to add expense"
