from fastapi import APIRouter, Request, Response

router = APIRouter()

_CACHE_CONTROL = "s-maxage=30, stale-while-revalidate=60"


@router.get('/stocks')
def get_stocks(request: Request, response: Response, symbols: str | None = None):
    service = request.app.state.quote_service
    requested = symbols.split(',') if symbols is not None else []
    result = service.get_quotes(requested)
    response.headers['Cache-Control'] = _CACHE_CONTROL
    return result.to_payload()
