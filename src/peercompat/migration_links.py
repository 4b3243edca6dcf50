"""Static table of migration guides for well-known packages."""

from peercompat.core.models import PackageMetadata

ANGULAR_UPDATE_GUIDE = "https://update.angular.io/"
CAPACITOR_UPDATE_GUIDE = "https://capacitorjs.com/docs/updating"
NGXS_MIGRATIONS = "https://ngxs.gitbook.io/ngxs/migrations"
ANGULAR_ESLINT_CHANGELOG = "https://github.com/angular-eslint/angular-eslint/blob/main/CHANGELOG.md"

MIGRATION_LINKS: dict[str, str] = {
    "@angular/core": ANGULAR_UPDATE_GUIDE,
    "@angular/common": ANGULAR_UPDATE_GUIDE,
    "@angular/forms": ANGULAR_UPDATE_GUIDE,
    "@angular/router": ANGULAR_UPDATE_GUIDE,
    "@angular/platform-browser": ANGULAR_UPDATE_GUIDE,
    "@angular/platform-browser-dynamic": ANGULAR_UPDATE_GUIDE,
    "@angular/compiler": ANGULAR_UPDATE_GUIDE,
    "@angular/compiler-cli": ANGULAR_UPDATE_GUIDE,
    "@angular/cli": ANGULAR_UPDATE_GUIDE,
    "@angular/build": "https://github.com/angular/angular-cli/releases",
    "@angular/language-service": "https://github.com/angular/angular/releases",
    "@ionic/angular": "https://ionicframework.com/docs/reference/versioning#release-notes",
    "@ionic/angular-toolkit": "https://github.com/ionic-team/angular-toolkit/releases",
    "@capacitor/core": CAPACITOR_UPDATE_GUIDE,
    "@capacitor/cli": CAPACITOR_UPDATE_GUIDE,
    "@capacitor/app": CAPACITOR_UPDATE_GUIDE,
    "@capacitor/haptics": CAPACITOR_UPDATE_GUIDE,
    "@capacitor/keyboard": CAPACITOR_UPDATE_GUIDE,
    "@capacitor/status-bar": CAPACITOR_UPDATE_GUIDE,
    "@ngxs/store": NGXS_MIGRATIONS,
    "@ngxs/logger-plugin": NGXS_MIGRATIONS,
    "@ngxs/devtools-plugin": NGXS_MIGRATIONS,
    "ngxs-reset-plugin": "https://github.com/ngxs-labs/reset-plugin/releases",
    "@ngneat/until-destroy": "https://github.com/ngneat/until-destroy/releases",
    "@ngx-translate/core": "https://github.com/ngx-translate/core/releases",
    "@ngx-translate/http-loader": "https://github.com/ngx-translate/http-loader/releases",
    "ionicons": "https://github.com/ionic-team/ionicons/releases",
    "ngx-ellipsis": "https://github.com/lentschi/ngx-ellipsis/releases",
    "survey-angular-ui": "https://github.com/surveyjs/survey-library/blob/master/CHANGELOG.md",
    "@angular-eslint/builder": ANGULAR_ESLINT_CHANGELOG,
    "@angular-eslint/eslint-plugin": ANGULAR_ESLINT_CHANGELOG,
    "@angular-eslint/eslint-plugin-template": ANGULAR_ESLINT_CHANGELOG,
    "@angular-eslint/schematics": ANGULAR_ESLINT_CHANGELOG,
    "@angular-eslint/template-parser": ANGULAR_ESLINT_CHANGELOG,
    "@typescript-eslint/eslint-plugin": "https://github.com/typescript-eslint/typescript-eslint/blob/main/packages/eslint-plugin/CHANGELOG.md",
    "@typescript-eslint/parser": "https://github.com/typescript-eslint/typescript-eslint/blob/main/packages/parser/CHANGELOG.md",
    "eslint": "https://github.com/eslint/eslint/releases",
    "eslint-config-prettier": "https://github.com/prettier/eslint-config-prettier/blob/main/CHANGELOG.md",
    "eslint-plugin-prettier": "https://github.com/prettier/eslint-plugin-prettier/blob/master/CHANGELOG.md",
    "prettier": "https://github.com/prettier/prettier/releases",
    "stylelint": "https://github.com/stylelint/stylelint/blob/main/CHANGELOG.md",
    "stylelint-config-standard": "https://github.com/stylelint/stylelint-config-standard/releases",
    "stylelint-config-standard-scss": "https://github.com/stylelint-scss/stylelint-config-standard-scss/releases",
    "jest": "https://github.com/jestjs/jest/blob/main/CHANGELOG.md",
    "jest-preset-angular": "https://github.com/thymikee/jest-preset-angular/blob/main/CHANGELOG.md",
    "@types/jest": "https://github.com/DefinitelyTyped/DefinitelyTyped/tree/master/types/jest",
    "jest-junit": "https://github.com/jest-community/jest-junit/releases",
    "jest-sonar-reporter": "https://github.com/3dmind/jest-sonar-reporter/releases",
    "rxjs": "https://rxjs.dev/deprecations",
    "zone.js": "https://github.com/angular/angular/blob/main/packages/zone.js/CHANGELOG.md",
    "typescript": "https://devblogs.microsoft.com/typescript/",
    "lodash-es": "https://github.com/lodash/lodash/wiki/Changelog",
    "jwt-decode": "https://github.com/auth0/jwt-decode/blob/master/CHANGELOG.md",
    "ua-parser-js": "https://github.com/faisalman/ua-parser-js/blob/master/CHANGELOG.md",
    "@types/ua-parser-js": "https://github.com/DefinitelyTyped/DefinitelyTyped/tree/master/types/ua-parser-js",
    "ts-node": "https://github.com/TypeStrong/ts-node/blob/main/CHANGELOG.md",
    "tslib": "https://github.com/microsoft/tslib/releases",
    "sonarqube-scanner": "https://github.com/SonarSource/sonarqube-scanner-npm/blob/master/CHANGELOG.md",
    "sonarjs": "https://github.com/SonarSource/eslint-plugin-sonarjs/blob/master/CHANGELOG.md",
    "replace-in-file": "https://github.com/adamreisnz/replace-in-file/blob/master/CHANGELOG.md",
    "ncp": "https://github.com/AvianFlu/ncp/issues",
}


class MigrationLinkResolver:
    """Resolve the migration guide link shown for a package."""

    def __init__(
        self,
        extra_links: dict[str, str] | None = None,
        excluded_prefixes: list[str] | None = None,
    ) -> None:
        self.links = {**MIGRATION_LINKS, **(extra_links or {})}
        self.excluded_prefixes = tuple(excluded_prefixes or ())

    def static_link(self, name: str) -> str:
        """Link from the table only, used when metadata is unavailable."""
        return self.links.get(name, "")

    def resolve(self, name: str, metadata: PackageMetadata | None = None) -> str:
        """Table entry, else homepage, else repository URL.

        Packages under an excluded namespace only ever get table entries.
        """
        if name in self.links:
            return self.links[name]
        if self.excluded_prefixes and name.startswith(self.excluded_prefixes):
            return ""
        if metadata is None:
            return ""
        return metadata.homepage or metadata.repository_url or ""
