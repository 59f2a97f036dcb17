import sys
import uvicorn

def run_https():
    """Run HTTPS server on port 9105"""
    print("Starting HTTPS server on port 9105...")
    uvicorn.run(
        "smarthr.main:app",
        host="0.0.0.0",
        port=9105,
        reload=False,
        ssl_certfile="cert.pem",
        ssl_keyfile="key.pem"
    )

def run_http():
    """Run HTTP server on port 9106"""
    print("Starting HTTP server on port 9106...")
    uvicorn.run(
        "smarthr.main:app",
        host="0.0.0.0",
        port=9106,
        reload=False
    )

if __name__ == "__main__":
    import multiprocessing

    # REQUIRED for Windows multiprocessing
    multiprocessing.freeze_support()

    if "--https-only" in sys.argv:
        run_https()
    elif "--http-only" in sys.argv:
        run_http()
    else:
        print("Starting servers in DUAL mode (HTTP + HTTPS)...")
        https_process = multiprocessing.Process(target=run_https)
        http_process = multiprocessing.Process(target=run_http)

        https_process.start()
        http_process.start()

        https_process.join()
        http_process.join()
