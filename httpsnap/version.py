VERSION = "0.3.0"
HTTPSNAP = "httpsnap " + VERSION

if __name__ == "__main__":  # pragma: no cover
    print(VERSION)
