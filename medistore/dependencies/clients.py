from fastapi import Request


# Clients are built once in the app lifespan and shared by every request.
def get_payment_gateway(request: Request):
    return request.app.state.payment_gateway


def get_object_store(request: Request):
    return request.app.state.object_store
