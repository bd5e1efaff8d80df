from fastapi import Request, Response, HTTPException
import os
import time
import hashlib

from rentpay.utils.security import _token_from_request

def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance FastAPI de rate limiting « best-effort »:
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (dev)
    - sinon fastapi-limiter (Redis) si le lifespan l'a initialisé
    - désactivé si app.state.rate_limit_enabled est False
    """
    async def _dep(request: Request, response: Response):
        def _user_key_from_request(req: Request) -> str:
            # Priorité: token de session (hashé) puis IP
            token = _token_from_request(req)
            path = req.url.path
            if token:
                h = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
                return f"user:{h}:{path}"
            ip = req.client.host if req.client else "local"
            return f"ip:{ip}:{path}"

        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _user_key_from_request(request)
            store = getattr(request.app.state, "_rl_store", {})
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is not True:
            return

        from fastapi_limiter.depends import RateLimiter

        async def _identifier(req: Request) -> str:
            return _user_key_from_request(req)
        return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
    return _dep
