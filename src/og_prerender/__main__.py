from og_prerender.server.app import run

if __name__ == "__main__":
    run()
