"""Tests that the function app registers every product function."""

import function_app

PRODUCT_FUNCTIONS = {
    "ReadAllProducts",
    "ReadProductById",
    "ReadProductByName",
    "ReadProduct",
    "CreateProduct",
    "UpsertProduct",
    "PatchProduct",
    "DeleteProduct",
}


def test_product_functions_are_registered():
    names = {f.get_function_name() for f in function_app.app.get_functions()}
    
    assert PRODUCT_FUNCTIONS <= names
    assert "health_check" in names
